"""
Pre-commit hook scripts installed by ``generate-commit init``.

The hook asks the tool for a message, lets the user accept, reject or edit it,
then commits with --no-verify and aborts the original commit.
"""

import os
import sys
import logging
from pathlib import Path

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

UNIX_HOOK = """#!/bin/bash
# Pre-commit hook for AI commit message generator

# Only act when something is staged
if ! git diff --staged --quiet; then
    COMMIT_MSG=$(generate-commit generate --plain)
    EXIT_CODE=$?

    if [ $EXIT_CODE -ne 0 ]; then
        echo "Error generating commit message"
        exit 1
    fi

    if [ -z "$COMMIT_MSG" ]; then
        echo "No commit message generated"
        exit 1
    fi

    echo ""
    echo "Generated commit message:"
    echo "=========================="
    echo "$COMMIT_MSG"
    echo "=========================="
    echo ""
    echo "Options:"
    echo "  [A]ccept and commit"
    echo "  [R]eject (abort commit)"
    echo "  [E]dit message"
    echo ""
    read -p "Your choice (A/R/E): " choice < /dev/tty

    case "$choice" in
        [Aa]*)
            git commit -m "$COMMIT_MSG" --no-verify
            # Abort the original commit, the message was committed above
            exit 1
            ;;
        [Rr]*)
            echo "Commit aborted by user"
            exit 1
            ;;
        [Ee]*)
            MSG_FILE=$(mktemp)
            echo "$COMMIT_MSG" > "$MSG_FILE"
            ${EDITOR:-nano} "$MSG_FILE" < /dev/tty > /dev/tty
            git commit -F "$MSG_FILE" --no-verify
            rm -f "$MSG_FILE"
            exit 1
            ;;
        *)
            echo "Invalid choice. Aborting commit."
            exit 1
            ;;
    esac
fi
"""

WINDOWS_HOOK = """@echo off
REM Pre-commit hook for AI commit message generator (Windows)

git diff --staged --quiet >nul 2>&1
if %errorlevel% equ 0 exit /b 0

set COMMIT_MSG=
for /f "delims=" %%i in ('generate-commit generate --plain') do set COMMIT_MSG=%%i
if errorlevel 1 (
    echo Error generating commit message
    exit /b 1
)

if "%COMMIT_MSG%"=="" (
    echo No commit message generated
    exit /b 1
)

echo.
echo Generated commit message:
echo ==========================
echo %COMMIT_MSG%
echo ==========================
echo.
echo Options:
echo   [A]ccept and commit
echo   [R]eject (abort commit)
echo   [E]dit message
echo.
set /p CHOICE=Your choice (A/R/E):

if /i "%CHOICE:~0,1%"=="A" goto accept
if /i "%CHOICE:~0,1%"=="R" goto reject
if /i "%CHOICE:~0,1%"=="E" goto edit
echo Invalid choice. Aborting commit.
exit /b 1

:accept
git commit -m "%COMMIT_MSG%" --no-verify
exit /b 1

:reject
echo Commit aborted by user
exit /b 1

:edit
echo %COMMIT_MSG%> "%TEMP%\\commit_msg.txt"
notepad "%TEMP%\\commit_msg.txt"
git commit -F "%TEMP%\\commit_msg.txt" --no-verify
del "%TEMP%\\commit_msg.txt"
exit /b 1
"""


def is_windows() -> bool:
    return sys.platform.startswith('win')


def generate_pre_commit_hook(windows: bool = None) -> str:
    """Return the hook script for the current (or given) platform."""
    if windows is None:
        windows = is_windows()
    return WINDOWS_HOOK if windows else UNIX_HOOK


def install_pre_commit_hook(repo_root: str, windows: bool = None) -> Path:
    """
    Write the pre-commit hook into the repository's hooks directory.

    Args:
        repo_root: Repository root directory
        windows: Force the Windows batch variant; detected when None

    Returns:
        Path of the installed hook

    Raises:
        ConfigurationError: If the hook cannot be written
    """
    if windows is None:
        windows = is_windows()

    hooks_dir = Path(repo_root) / '.git' / 'hooks'
    hook_path = hooks_dir / ('pre-commit.bat' if windows else 'pre-commit')

    try:
        hooks_dir.mkdir(parents=True, exist_ok=True)
        with open(hook_path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(generate_pre_commit_hook(windows))
        os.chmod(hook_path, 0o755)
    except OSError as e:
        raise ConfigurationError(f"failed to create pre-commit hook: {e}")

    logger.info(f"Installed pre-commit hook: {hook_path}")
    return hook_path
