"""
Security utilities for Commit Generator.

This module provides secure storage of the API key and keeps secrets out of
logs and commit messages.
"""

import re
import logging
from typing import Optional
import keyring
from ..exceptions import SecurityError, ValidationError

logger = logging.getLogger(__name__)


class APIKeyManager:
    """Secure API key management using system keyring."""

    SERVICE_NAME = "commit-generator"

    def __init__(self):
        """Initialize the API key manager."""
        try:
            # Test keyring availability
            keyring.get_keyring()
        except Exception as e:
            logger.warning(f"Keyring not available: {e}")

    def store_api_key(self, provider: str, api_key: str) -> None:
        """
        Store API key securely in system keyring.

        Args:
            provider: The service provider name (e.g., 'ollama')
            api_key: The API key to store

        Raises:
            SecurityError: If keyring storage fails
        """
        try:
            keyring.set_password(self.SERVICE_NAME, provider, api_key)
            logger.info(f"API key for {provider} stored securely")
        except Exception as e:
            raise SecurityError(f"Failed to store API key for {provider}: {e}")

    def get_api_key(self, provider: str) -> Optional[str]:
        """
        Retrieve API key from secure storage.

        Args:
            provider: The service provider name

        Returns:
            The API key if found, None otherwise

        Raises:
            SecurityError: If keyring access fails
        """
        try:
            api_key = keyring.get_password(self.SERVICE_NAME, provider)
            if api_key:
                logger.debug(f"Retrieved API key for {provider} from secure storage")
            return api_key
        except Exception as e:
            raise SecurityError(f"Failed to retrieve API key for {provider}: {e}")

    def delete_api_key(self, provider: str) -> None:
        """
        Delete API key from secure storage.

        Raises:
            SecurityError: If keyring deletion fails
        """
        try:
            keyring.delete_password(self.SERVICE_NAME, provider)
            logger.info(f"API key for {provider} deleted from secure storage")
        except Exception as e:
            raise SecurityError(f"Failed to delete API key for {provider}: {e}")


class InputValidator:
    """Validation of generated text before it is committed."""

    # Patterns for detecting sensitive information
    SENSITIVE_PATTERNS = [
        r'(?i)(api[_\s-]?key|secret|token|password)\s*[:=]\s*[\'"]+([a-zA-Z0-9\-_]{15,})',
        r'(?i)(api[_\s-]?key|secret|token|password)\s*[:=]\s*([a-zA-Z0-9\-_]{30,})',
        r'(?i)(bearer|authorization)\s*:\s*[\'"]*([a-zA-Z0-9\-_\.]{20,})',
        r'(?i)sk-[a-zA-Z0-9]{20,}',
        r'(?i)ghp_[a-zA-Z0-9]{36}',
        r'(?i)(AKIA[0-9A-Z]{16})',
    ]

    CRITICAL_PATTERNS = [
        (r'(?i)sk-[a-zA-Z0-9\-_]{32,}', 'OpenAI API Key'),
        (r'(?i)ghp_[a-zA-Z0-9]{36}', 'GitHub Personal Access Token'),
        (r'(?i)(AKIA[0-9A-Z]{16})', 'AWS Access Key'),
        (r'(?i)xoxb-[a-zA-Z0-9\-]{40,}', 'Slack Token'),
    ]

    @classmethod
    def validate_commit_message(cls, message: str) -> str:
        """
        Validate a commit message before it is written.

        Args:
            message: The commit message to validate

        Returns:
            Stripped commit message

        Raises:
            ValidationError: If message is empty or carries a secret
        """
        if not message or not message.strip():
            raise ValidationError("Empty commit message")

        message = message.strip()
        for pattern, sensitive_type in cls.CRITICAL_PATTERNS:
            if re.search(pattern, message):
                raise ValidationError(
                    f"Potential {sensitive_type} detected in commit message. "
                    "Please review the message before committing."
                )
        return message


class SecureLogger:
    """Logger wrapper that filters sensitive information."""

    def __init__(self, logger: logging.Logger):
        """Initialize secure logger wrapper."""
        self.logger = logger

    def log_safe(self, level: int, message: str, details: Optional[str] = None) -> None:
        """
        Log message after filtering sensitive information.

        Args:
            level: Log level
            message: Log message
            details: Additional details
        """
        safe_message = self._filter_sensitive_info(message)
        safe_details = self._filter_sensitive_info(details) if details else None

        extra = {'details': safe_details if safe_details else 'No additional details'}
        self.logger.log(level, safe_message, extra=extra)

    def _filter_sensitive_info(self, text: str) -> str:
        """Redact anything matching a sensitive pattern."""
        if not text:
            return text

        filtered = text
        for pattern in InputValidator.SENSITIVE_PATTERNS:
            if re.compile(pattern).groups > 1:
                filtered = re.sub(pattern, r'\1: [REDACTED]', filtered)
            else:
                filtered = re.sub(pattern, '[REDACTED]', filtered)

        return filtered


def mask_api_key(api_key: str) -> str:
    """
    Mask API key for safe display.

    Args:
        api_key: The API key to mask

    Returns:
        Masked API key showing only first and last few characters
    """
    if not api_key or len(api_key) < 8:
        return "[REDACTED]"

    return f"{api_key[:4]}...{api_key[-4:]}"
