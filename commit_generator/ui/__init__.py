"""
Terminal UI components for Commit Generator.

Status output goes to stderr so stdout only ever carries the generated
message.
"""

import sys
import time
import threading


class AnimatedSpinner:
    """Animated spinner shown while waiting on slow operations."""

    def __init__(self, stream=None):
        self.frames = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
        self.is_spinning = False
        self.thread = None
        self.message = ""
        self.stream = stream or sys.stderr

    def start(self, message: str = "Processing") -> None:
        """Start the spinner with a message."""
        self.message = message
        if not self.stream.isatty():
            self.stream.write(f"{message}\n")
            self.stream.flush()
            return
        self.is_spinning = True
        self.thread = threading.Thread(target=self._spin)
        self.thread.daemon = True
        self.thread.start()

    def stop(self, final_message: str = "") -> None:
        """Stop the spinner and show final message."""
        if self.is_spinning:
            self.is_spinning = False
            self.thread.join()
            self.thread = None
            # Clear the spinner line
            self.stream.write('\r' + ' ' * (len(self.message) + 10) + '\r')
        if final_message:
            self.stream.write(f"{final_message}\n")
        self.stream.flush()

    def _spin(self) -> None:
        idx = 0
        while self.is_spinning:
            frame = self.frames[idx % len(self.frames)]
            self.stream.write(f'\r{frame} {self.message}')
            self.stream.flush()
            time.sleep(0.1)
            idx += 1


class InteractivePrompt:
    """Interactive yes/no prompts."""

    @staticmethod
    def confirm(message: str, default: bool = False) -> bool:
        """Ask a yes/no question, returning default on empty input."""
        default_text = "Y/n" if default else "y/N"

        print(f"\n{message} ({default_text}): ", end="", file=sys.stderr, flush=True)

        try:
            response = input().strip().lower()
            if not response:
                return default
            return response in ('y', 'yes')
        except (KeyboardInterrupt, EOFError):
            print("\nOperation cancelled", file=sys.stderr)
            return False


class StatusDisplay:
    """Display of generated messages."""

    @staticmethod
    def show_commit_message(message: str) -> None:
        """Show a single-line commit subject in cyan."""
        print("\n" + Colors.colorize(message, Colors.CYAN))

    @staticmethod
    def show_split_suggestion(message: str) -> None:
        """Show a suggestion to split the staged changes."""
        print("\n" + Colors.colorize("AI Suggestion (Split Changes):", Colors.YELLOW))
        print(message)


class Colors:
    """ANSI color codes for terminal styling."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"

    RESET = "\033[0m"

    @classmethod
    def colorize(cls, text: str, color: str) -> str:
        """Colorize text."""
        return f"{color}{text}{cls.RESET}"
