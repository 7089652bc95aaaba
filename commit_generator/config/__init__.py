"""
Configuration management for Commit Generator.

This module handles loading, validation, and management of configuration settings.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import dotenv_values

from ..exceptions import ConfigurationError, SecurityError
from ..security import APIKeyManager, mask_api_key

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = '.commit-generator-config'
DEFAULT_BASE_URL = 'http://localhost:11434/v1'
DEFAULT_MODEL = 'gpt-oss:120b'
KEYRING_PROVIDER = 'ollama'


def find_repo_root(start: Optional[Path] = None) -> Optional[Path]:
    """
    Find the repository root by searching parent directories for '.git'.

    Args:
        start: Directory to start from, defaults to the current directory

    Returns:
        Repository root or None when not inside a repository
    """
    current = Path(start or Path.cwd()).resolve()
    while True:
        if (current / '.git').exists():
            return current
        if current == current.parent:
            return None
        current = current.parent


@dataclass
class GeneratorConfig:
    """Configuration data class for Commit Generator."""

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL

    # Optional settings with defaults
    timeout: int = 60
    max_retries: int = 3
    retry_base_delay: float = 2.0
    log_path: str = ".commitLogs"

    def __post_init__(self):
        """Post-initialization validation."""
        self.validate()

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.base_url:
            raise ConfigurationError("BASE_URL is required")

        if not self.base_url.startswith(('http://', 'https://')):
            raise ConfigurationError("BASE_URL must be a valid URL")

        if not self.model:
            raise ConfigurationError("MODEL is required")

        if self.timeout < 1 or self.timeout > 600:
            raise ConfigurationError("timeout must be between 1 and 600 seconds")

        if self.max_retries < 0 or self.max_retries > 10:
            raise ConfigurationError("max_retries must be between 0 and 10")

        if self.retry_base_delay < 0:
            raise ConfigurationError("retry_base_delay must not be negative")

        logger.debug("Configuration validation passed")

    def get_masked_config(self) -> Dict[str, Any]:
        """
        Get configuration with sensitive values masked.

        Returns:
            Dictionary with masked sensitive information
        """
        return {
            'api_key': mask_api_key(self.api_key),
            'base_url': self.base_url,
            'model': self.model,
            'timeout': self.timeout,
            'max_retries': self.max_retries,
            'retry_base_delay': self.retry_base_delay,
            'log_path': self.log_path,
        }


class ConfigurationLoader:
    """Handles loading configuration from various sources."""

    # Environment variable -> config key
    ENV_VARS = {
        'OLLAMA_API_KEY': 'API_KEY',
        'OLLAMA_BASE_URL': 'BASE_URL',
        'OLLAMA_MODEL': 'MODEL',
        'COMMIT_GENERATOR_TIMEOUT': 'TIMEOUT',
        'COMMIT_GENERATOR_MAX_RETRIES': 'MAX_RETRIES',
        'COMMIT_GENERATOR_LOG_PATH': 'LOG_PATH',
    }

    INT_KEYS = ('TIMEOUT', 'MAX_RETRIES')
    FLOAT_KEYS = ('RETRY_BASE_DELAY',)

    def __init__(self, api_key_manager: Optional[APIKeyManager] = None):
        """Initialize configuration loader."""
        self.api_key_manager = api_key_manager or APIKeyManager()

    def load_config(self, config_path: Optional[str] = None) -> GeneratorConfig:
        """
        Load configuration from all available sources.

        Configuration priority (highest to lowest):
        1. Command-line arguments (handled by caller)
        2. Configuration file (.commit-generator-config or --config path)
        3. .env file in the repository root
        4. Secure storage (keyring)
        5. Environment variables
        6. Defaults

        Args:
            config_path: Optional path to specific config file

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationError: If configuration cannot be loaded or is invalid
        """
        config: Dict[str, str] = {}
        config_sources = []

        env_config = self._load_from_environment(os.environ)
        if env_config:
            config.update(env_config)
            config_sources.append("environment variables")

        secure_config = self._load_from_secure_storage()
        if secure_config:
            config.update(secure_config)
            config_sources.append("secure storage")

        repo_root = find_repo_root()
        if repo_root is not None:
            dotenv_file = repo_root / '.env'
            if dotenv_file.exists():
                dotenv_config = self._load_from_environment(dotenv_values(dotenv_file))
                if dotenv_config:
                    config.update(dotenv_config)
                    config_sources.append(f".env file ({dotenv_file})")

        config_file = self._find_config_file(config_path, repo_root)
        if config_file:
            config.update(self._load_config_file(config_file))
            config_sources.append(f"config file ({config_file})")

        if config_sources:
            logger.info(f"Configuration loaded from: {' → '.join(config_sources)}")

        return self._create_config_object(config)

    def _load_from_environment(self, environ) -> Dict[str, str]:
        """Map known environment variables onto config keys."""
        return {
            key: environ[env_var]
            for env_var, key in self.ENV_VARS.items()
            if environ.get(env_var)
        }

    def _load_from_secure_storage(self) -> Dict[str, str]:
        """Load API key from secure storage."""
        try:
            api_key = self.api_key_manager.get_api_key(KEYRING_PROVIDER)
            if api_key:
                return {'API_KEY': api_key}
        except SecurityError as e:
            logger.debug(f"Could not load from secure storage: {e}")
        return {}

    def _find_config_file(self, config_path: Optional[str],
                          repo_root: Optional[Path]) -> Optional[Path]:
        if config_path:
            config_file = Path(config_path)
            if not config_file.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            return config_file

        if repo_root is not None and (repo_root / CONFIG_FILE_NAME).exists():
            return repo_root / CONFIG_FILE_NAME
        return None

    def _load_config_file(self, config_file: Path) -> Dict[str, str]:
        """Load KEY=VALUE settings from a config file."""
        config = {}
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line or line.startswith('#'):
                        continue

                    if '=' not in line:
                        logger.warning(f"Invalid config line {line_num} in {config_file}: {line}")
                        continue

                    key, value = line.split('=', 1)
                    value = value.strip()
                    if value:
                        config[key.strip().upper()] = value
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration from {config_file}: {e}")

        return config

    def _create_config_object(self, config: Dict[str, str]) -> GeneratorConfig:
        """
        Create GeneratorConfig object from configuration dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            GeneratorConfig object
        """
        processed_config: Dict[str, Any] = {}

        for key in ('API_KEY', 'BASE_URL', 'MODEL', 'LOG_PATH'):
            if key in config:
                processed_config[key.lower()] = config[key]

        for key in self.INT_KEYS:
            if key in config:
                try:
                    processed_config[key.lower()] = int(config[key])
                except ValueError:
                    logger.warning(f"Invalid integer value for {key}: {config[key]}")

        for key in self.FLOAT_KEYS:
            if key in config:
                try:
                    processed_config[key.lower()] = float(config[key])
                except ValueError:
                    logger.warning(f"Invalid number for {key}: {config[key]}")

        return GeneratorConfig(**processed_config)

    def config_exists(self) -> bool:
        """Check whether the repository already has a config file."""
        repo_root = find_repo_root()
        return repo_root is not None and (repo_root / CONFIG_FILE_NAME).exists()

    def save_default_config(self, repo_root: str) -> Path:
        """
        Write a default configuration file to the repository root.

        Args:
            repo_root: Repository root directory

        Returns:
            Path to created config file
        """
        config_path = Path(repo_root) / CONFIG_FILE_NAME
        template_content = f"""# Commit Generator Configuration

# API key for the text-generation service (or set OLLAMA_API_KEY)
API_KEY={os.environ.get('OLLAMA_API_KEY', '')}
BASE_URL={DEFAULT_BASE_URL}
MODEL={DEFAULT_MODEL}

# Optional settings
TIMEOUT=60
MAX_RETRIES=3
RETRY_BASE_DELAY=2
LOG_PATH=.commitLogs
"""
        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(template_content)
        except OSError as e:
            raise ConfigurationError(f"failed to write config file: {e}")

        logger.info(f"Created configuration file: {config_path}")
        return config_path
