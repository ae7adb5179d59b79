#!/usr/bin/env python3
"""
Locate the most recent piper_train checkpoint.

Lightning writes checkpoints as
lightning_logs/version_<N>/checkpoints/epoch=<E>-step=<S>.ckpt and adds a
-v<K> suffix when a name would collide. Copying a training directory from
macOS leaves AppleDouble '._epoch=...' files next to the real ones, which
match the same pattern and must be ignored.
"""

from __future__ import annotations

import re
from pathlib import Path

from piper_voice.errors import CheckpointNotFoundError
from piper_voice.models import Checkpoint

CHECKPOINT_SUFFIX = ".ckpt"
CHECKPOINT_PATTERN = re.compile(
    r"^epoch=(?P<epoch>\d+)-step=(?P<step>\d+)(?:-v(?P<version>\d+))?\.ckpt$"
)


def is_metadata_artifact(path: Path, root: Path | None = None) -> bool:
    """
    True for AppleDouble '._*' files and other hidden dot-files.

    With root given, a file inside a hidden directory below root (such as
    .Trash/ or .snapshots/) counts as an artifact too.
    """
    if root is not None:
        try:
            parts = path.relative_to(root).parts
        except ValueError:
            parts = (path.name,)
        return any(part.startswith(".") for part in parts)
    return path.name.startswith(".")


def parse_checkpoint_name(path: str | Path) -> Checkpoint | None:
    """
    Parse epoch and step from a checkpoint filename.

    Returns:
        Checkpoint, or None when the name does not follow the pattern.
    """
    path = Path(path)
    match = CHECKPOINT_PATTERN.match(path.name)
    if match is None:
        return None
    return Checkpoint(
        path=path,
        epoch=int(match.group("epoch")),
        step=int(match.group("step")),
        version=int(match.group("version") or 0),
    )


def list_checkpoints(directory: str | Path) -> list[Checkpoint]:
    """
    Find checkpoints under a directory, oldest first.

    Sorting is numeric on (epoch, step, version), so epoch=10 comes after
    epoch=9.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    checkpoints: list[Checkpoint] = []
    for path in directory.rglob(f"*{CHECKPOINT_SUFFIX}"):
        if is_metadata_artifact(path, directory) or not path.is_file():
            continue
        checkpoint = parse_checkpoint_name(path)
        if checkpoint is not None:
            checkpoints.append(checkpoint)

    return sorted(checkpoints, key=lambda c: (c.sort_key, str(c.path)))


def find_latest_checkpoint(directory: str | Path) -> Checkpoint:
    """
    Return the checkpoint with the highest epoch/step under directory.

    Raises:
        CheckpointNotFoundError: If no file matches the checkpoint pattern.
    """
    checkpoints = list_checkpoints(directory)
    if not checkpoints:
        raise CheckpointNotFoundError(f"No checkpoint found in {directory}")
    return checkpoints[-1]
