#!/usr/bin/env python3
"""Helpers for locating and running the external tools of the pipeline."""

from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from piper_voice.errors import CommandError, MissingToolError

FFMPEG_INSTALL_HINT = (
    "ffmpeg is required to decode and extract audio. "
    "Install it with apt (`sudo apt-get install ffmpeg`), Homebrew "
    "(`brew install ffmpeg`) or from https://ffmpeg.org/download.html."
)


class CommandRunner(Protocol):
    """Protocol matching the subset of ``subprocess.run`` used here."""

    def __call__(
        self,
        command: list[str],
        *,
        check: bool,
        text: bool,
        capture_output: bool,
        cwd: str | None = None,
        input: str | None = None,
    ) -> subprocess.CompletedProcess[str]:
        ...


def _default_runner(
    command: list[str],
    *,
    check: bool,
    text: bool,
    capture_output: bool,
    cwd: str | None = None,
    input: str | None = None,
) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        command,
        check=check,
        text=text,
        capture_output=capture_output,
        cwd=cwd,
        input=input,
    )


def require_executable(name: str, hint: str | None = None) -> str:
    """
    Resolve an executable on PATH.

    Args:
        name: Executable name or path.
        hint: Installation instructions appended to the error message.

    Returns:
        Absolute path of the executable.

    Raises:
        MissingToolError: If the executable cannot be found.
    """
    resolved = shutil.which(name)
    if resolved is None:
        message = f"Required executable not found: {name}"
        if hint:
            message = f"{message}\n{hint}"
        raise MissingToolError(message)
    return resolved


def ensure_ffmpeg_available() -> str:
    """Return the ffmpeg path or raise MissingToolError with install help."""
    return require_executable("ffmpeg", FFMPEG_INSTALL_HINT)


def run_command(
    command: Sequence[str | Path],
    *,
    runner: CommandRunner | None = None,
    capture_output: bool = False,
    cwd: str | Path | None = None,
    input_text: str | None = None,
) -> str:
    """
    Run an external command, echoing it first.

    Args:
        command: Program and arguments.
        runner: Replacement for subprocess.run (used by tests).
        capture_output: Capture and return stdout/stderr instead of streaming.
        cwd: Working directory for the command.
        input_text: Text written to the command's stdin.

    Returns:
        Combined stdout/stderr when capture_output is set, else "".

    Raises:
        MissingToolError: If the program cannot be started.
        CommandError: If the program exits with a non-zero status.
    """
    args = [str(part) for part in command]
    print(f"$ {shlex.join(args)}")

    active_runner = runner or _default_runner
    try:
        result = active_runner(
            args,
            check=True,
            text=True,
            capture_output=capture_output,
            cwd=str(cwd) if cwd is not None else None,
            input=input_text,
        )
    except FileNotFoundError as exc:
        missing = args[0] if args else "command"
        raise MissingToolError(f"Required command not found: {missing}") from exc
    except subprocess.CalledProcessError as exc:
        stdout = getattr(exc, "stdout", "") or ""
        stderr = getattr(exc, "stderr", "") or ""
        details = f"{stdout}{stderr}".strip()
        message = f"Command failed (exit {exc.returncode}): {shlex.join(args)}"
        if details:
            message = f"{message}\n{details}"
        raise CommandError(message) from exc

    if capture_output:
        output = (result.stdout or "") + (result.stderr or "")
        return output.strip()
    return ""
