"""OS collaborators: default-application launcher and process runner."""

import logging
import platform
import subprocess
from typing import List, Sequence

logger = logging.getLogger(__name__)


def open_with_default_app(path: str) -> None:
    """Open ``path`` with the platform's default application.

    Raises:
        subprocess.CalledProcessError: The launcher exited non-zero
        FileNotFoundError: The launcher is not installed
    """
    system = platform.system()
    logger.debug(f"Opening {path} on {system}")
    if system == "Darwin":  # macOS
        subprocess.run(["open", path], check=True)
    elif system == "Windows":
        subprocess.run(["start", "", path], shell=True, check=True)
    else:  # Linux and others
        subprocess.run(["xdg-open", path], check=True)


def run_command(argv: Sequence[str]) -> int:
    """Run ``argv`` in the foreground and return its exit status.

    The process inherits the terminal so interactive programs work.
    """
    args: List[str] = list(argv)
    logger.debug(f"Running {args}")
    return subprocess.run(args).returncode
