"""
CLI module for Commit Generator.

This module provides the ``generate-commit`` command-line interface.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ConfigurationLoader, GeneratorConfig, KEYRING_PROVIDER
from .config.rules import RulesLoader, write_rules_template
from .git import GitOperations
from .ai import AIClient, is_split_suggestion
from .hooks import install_pre_commit_hook
from .security import APIKeyManager, InputValidator
from .utils import LoggingManager, ProgressManager
from .ui import StatusDisplay, InteractivePrompt
from .exceptions import (
    CommitGeneratorError, ConfigurationError, GitOperationError, APIError,
    SecurityError, ValidationError
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog='generate-commit',
        description='Generate a commit message from staged changes')

    parser.add_argument('-c', '--config', type=str,
                        help='Path to specific config file')
    parser.add_argument('-m', '--model', type=str,
                        help='Override model from config')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    # After add_subparsers, or its None default would win
    parser.set_defaults(command='generate', plain=False, commit=False, yes=False)

    generate_parser = subparsers.add_parser(
        'generate', aliases=['gen'], help='Generate commit message from staged changes (default)')
    generate_parser.add_argument('--plain', action='store_true',
                                 help='Print only the message, without colors or progress')
    generate_parser.add_argument('--commit', action='store_true',
                                 help='Commit the staged changes with the generated message')
    generate_parser.add_argument('-y', '--yes', action='store_true',
                                 help='Commit without asking for confirmation')

    init_parser = subparsers.add_parser(
        'init', help='Initialize repository with config, rules, and pre-commit hook')
    init_parser.add_argument('--force', action='store_true',
                             help='Reinitialize even if a config file exists')

    config_parser = subparsers.add_parser('config', help='Configuration management')
    config_subparsers = config_parser.add_subparsers(dest='config_action')

    config_subparsers.add_parser('show', help='Show current configuration')
    config_subparsers.add_parser('test', help='Test AI service connection')

    set_key_parser = config_subparsers.add_parser('set-key', help='Store API key securely')
    set_key_parser.add_argument('api_key', help='API key to store')

    config_subparsers.add_parser('delete-key', help='Remove the stored API key')

    args = parser.parse_args(argv)
    if args.command == 'gen':
        args.command = 'generate'
    return args


class GenerateWorkflow:
    """Orchestrates diff synthesis, message generation and the optional commit."""

    def __init__(self, config: GeneratorConfig, git_ops: Optional[GitOperations] = None,
                 rules_loader: Optional[RulesLoader] = None,
                 ai_client: Optional[AIClient] = None,
                 progress: Optional[ProgressManager] = None):
        """
        Initialize workflow with configuration and collaborators.

        Args:
            config: Commit Generator configuration
            git_ops: Repository operations
            rules_loader: Team rules provider
            ai_client: Message generator; created from config when omitted
            progress: Progress reporter
        """
        self.config = config
        self.git_ops = git_ops or GitOperations()
        self.rules_loader = rules_loader or RulesLoader()
        self.ai_client = ai_client
        self.progress = progress or ProgressManager()

    def run(self, args: argparse.Namespace) -> str:
        """
        Generate a message for the staged changes and optionally commit it.

        Returns:
            The generated message

        Raises:
            CommitGeneratorError: If any phase fails
        """
        if not self.git_ops.is_inside_repo():
            raise GitOperationError("not a git repository")

        if not self.git_ops.validate_staged_changes():
            raise ValidationError(
                "no staged changes found. Please stage your changes using 'git add'")

        try:
            rules = self.rules_loader.load_rules()
        except CommitGeneratorError as e:
            logger.warning(f"Failed to load rules: {e}. Proceeding without rules.")
            rules = ""

        diff = self.git_ops.get_staged_diff()

        if self.ai_client is None:
            self.ai_client = AIClient(self.config)

        self.progress.show_operation("Generating commit message...")
        try:
            message = self.ai_client.generate_commit_message(diff, rules)
        finally:
            self.progress.cleanup()

        self._display(message, plain=args.plain)

        if args.commit or args.yes:
            self._commit(message, confirm=not args.yes)
        return message

    def _display(self, message: str, plain: bool) -> None:
        if plain:
            print(message)
        elif is_split_suggestion(message):
            StatusDisplay.show_split_suggestion(message)
        else:
            StatusDisplay.show_commit_message(message)

    def _commit(self, message: str, confirm: bool) -> None:
        if is_split_suggestion(message):
            raise ValidationError(
                "the staged changes should be split; stage and commit them separately")

        message = InputValidator.validate_commit_message(message)
        if confirm and not InteractivePrompt.confirm("Commit with this message?", False):
            self.progress.show_info("Commit cancelled")
            return

        commit_id = self.git_ops.commit_changes(message)
        self.progress.show_success(f"Committed {commit_id.decode('ascii')[:7]}")


def init_repository(git_ops: GitOperations, config_loader: ConfigurationLoader,
                    force: bool = False, progress: Optional[ProgressManager] = None) -> bool:
    """
    Create config file, rules file and pre-commit hook in the current repository.

    Returns:
        False if the repository was already initialized, True otherwise
    """
    progress = progress or ProgressManager()

    if not git_ops.is_inside_repo():
        raise GitOperationError(
            "not a git repository. Please run this command from within a git repository")

    repo_root = git_ops.get_repo_root()

    if config_loader.config_exists() and not force:
        progress.show_info("Repository already initialized. Use --force to reinitialize.")
        return False

    progress.show_info("Initializing commit generator...")

    config_loader.save_default_config(repo_root)
    progress.show_success("Created .commit-generator-config")

    if write_rules_template(repo_root):
        progress.show_success("Created .git-commit-rules-for-ai")
    else:
        progress.show_success("Rules file already exists")

    install_pre_commit_hook(repo_root)
    progress.show_success("Created pre-commit hook")

    progress.show_info("\nInitialization complete!")
    progress.show_info("Next steps:")
    progress.show_info("1. Update .commit-generator-config with your API key if needed")
    progress.show_info("2. Customize .git-commit-rules-for-ai with your team's rules")
    progress.show_info("3. Stage your changes and commit - the hook will generate your commit message!")
    return True


def handle_config_commands(args: argparse.Namespace) -> None:
    """Handle configuration-related commands."""
    progress = ProgressManager()

    if args.config_action == 'show':
        config = ConfigurationLoader().load_config(args.config)
        print("\nCurrent Configuration:")
        print("=" * 40)
        for key, value in config.get_masked_config().items():
            print(f"{key}: {value}")
        print("=" * 40)

    elif args.config_action == 'test':
        config = ConfigurationLoader().load_config(args.config)
        if args.model:
            config.model = args.model
        with progress:
            progress.show_operation("Testing AI service connection")
            connected = AIClient(config).test_connection()
        if not connected:
            raise APIError("AI service connection failed")
        progress.show_success("AI service connection successful")

    elif args.config_action == 'set-key':
        APIKeyManager().store_api_key(KEYRING_PROVIDER, args.api_key)
        progress.show_success("API key stored securely")

    elif args.config_action == 'delete-key':
        APIKeyManager().delete_api_key(KEYRING_PROVIDER)
        progress.show_success("API key removed from secure storage")

    else:
        raise ValidationError("missing config action: use show, test, set-key or delete-key")


def _error_prefix(error: Exception) -> str:
    if isinstance(error, ConfigurationError):
        return "Configuration error"
    if isinstance(error, GitOperationError):
        return "Git error"
    if isinstance(error, APIError):
        return "AI service error"
    if isinstance(error, SecurityError):
        return "Security error"
    return "Error"


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the generate-commit CLI."""
    args = parse_args(argv)
    progress = ProgressManager(quiet=getattr(args, 'plain', False))

    try:
        if args.command == 'config':
            handle_config_commands(args)
            return

        if args.command == 'init':
            init_repository(GitOperations(), ConfigurationLoader(), force=args.force,
                            progress=progress)
            return

        config = ConfigurationLoader().load_config(args.config)
        if args.model:
            config.model = args.model

        logging_manager = LoggingManager(config.log_path)
        logging_manager.set_verbose(args.verbose)
        logging_manager.get_secure_logger().log_safe(
            logging.INFO, "Starting commit message generation", f"Arguments: {vars(args)}")

        GenerateWorkflow(config, progress=progress).run(args)

    except KeyboardInterrupt:
        progress.show_error("Operation cancelled by user")
        sys.exit(1)
    except CommitGeneratorError as e:
        progress.show_error(f"{_error_prefix(e)}: {e}")
        logger.debug(f"{type(e).__name__}: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
