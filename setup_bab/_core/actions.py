"""
Job runner facilities: inputs, outputs, PATH and workflow log commands.

Follows the GitHub Actions runner conventions:
- Inputs arrive as INPUT_<NAME> environment variables
- Outputs are appended to the file named by GITHUB_OUTPUT
- PATH additions are appended to the file named by GITHUB_PATH
- Log levels map to ::debug::, ::warning:: and ::error:: commands
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from typing import Mapping, Optional, TextIO


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read a job input.

    "repo-token" is read from INPUT_REPO-TOKEN; surrounding whitespace is
    trimmed and a missing input reads as "".
    """
    env = os.environ if environ is None else environ
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return env.get(key, "").strip()


def _append_to_env_file(path: str, text: str) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


def set_output(name: str, value: str) -> None:
    """
    Publish a step output.

    Without GITHUB_OUTPUT (older runners) the legacy ::set-output command is
    written to stdout instead.
    """
    output_file = os.environ.get("GITHUB_OUTPUT")
    if output_file:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        _append_to_env_file(
            output_file, f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
        )
    else:
        sys.stdout.write(
            f"::set-output name={_escape_property(name)}::{_escape_data(value)}\n"
        )


def add_path(path: str) -> None:
    """Prepend a directory to PATH for this process and later job steps."""
    path_file = os.environ.get("GITHUB_PATH")
    if path_file:
        _append_to_env_file(path_file, f"{path}\n")
    os.environ["PATH"] = f"{path}{os.pathsep}{os.environ.get('PATH', '')}"


def set_failed(message: str, stream: Optional[TextIO] = None) -> None:
    """Report a step failure; the caller exits non-zero."""
    stream = stream or sys.stdout
    stream.write(f"::error::{_escape_data(message)}\n")


class ActionsFormatter(logging.Formatter):
    """Render records as workflow commands keyed by level."""

    COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return message
        # Workflow commands are single-line
        return f"::{command}::{_escape_data(message)}"


class ActionsLogHandler(logging.StreamHandler):
    """Stream handler writing workflow log commands to stdout."""

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__(stream or sys.stdout)
        self.setFormatter(ActionsFormatter())


def configure_logging(level: int = logging.DEBUG) -> logging.Handler:
    """Attach an ActionsLogHandler to the setup_bab logger."""
    handler = ActionsLogHandler()
    package_logger = logging.getLogger("setup_bab")
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
    return handler
