#!/usr/bin/env python3
"""
Print the newest piper_train checkpoint under a directory.

Exits with status 1 when no epoch=<E>-step=<S>.ckpt file exists, so the
output can be used directly in shell scripts:

    CKPT=$(python scripts/latest_checkpoint.py ../data/training) || exit 1
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from piper_voice.checkpoints import find_latest_checkpoint
from piper_voice.errors import CheckpointNotFoundError


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Find the latest training checkpoint")
    parser.add_argument("directory", help="Training directory to search recursively")
    args = parser.parse_args(argv)

    try:
        checkpoint = find_latest_checkpoint(args.directory)
    except CheckpointNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(checkpoint.path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
