#!/usr/bin/env python3
"""Unit tests for latest-checkpoint selection."""

from __future__ import annotations

import io
import sys
import tempfile
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import TestCase

# Ensure the trainer module paths are available for imports
TRAINER_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = TRAINER_DIR / "src"
SCRIPTS_DIR = TRAINER_DIR / "scripts"
for path in [str(SRC_DIR), str(SCRIPTS_DIR)]:
    if path not in sys.path:
        sys.path.insert(0, path)

from piper_voice.checkpoints import (  # noqa: E402
    find_latest_checkpoint,
    is_metadata_artifact,
    list_checkpoints,
    parse_checkpoint_name,
)
from piper_voice.errors import CheckpointNotFoundError  # noqa: E402


class ParseCheckpointNameTests(TestCase):
    """Tests for parsing epoch/step from filenames."""

    def test_parses_epoch_and_step(self) -> None:
        checkpoint = parse_checkpoint_name("epoch=2164-step=1355540.ckpt")

        self.assertIsNotNone(checkpoint)
        self.assertEqual(checkpoint.epoch, 2164)
        self.assertEqual(checkpoint.step, 1355540)
        self.assertEqual(checkpoint.version, 0)

    def test_parses_version_suffix(self) -> None:
        checkpoint = parse_checkpoint_name("epoch=5-step=100-v2.ckpt")

        self.assertIsNotNone(checkpoint)
        self.assertEqual(checkpoint.version, 2)

    def test_rejects_other_names(self) -> None:
        for name in ["last.ckpt", "epoch=5.ckpt", "epoch=5-step=100.pt", "model.onnx"]:
            with self.subTest(name=name):
                self.assertIsNone(parse_checkpoint_name(name))

    def test_detects_appledouble_artifacts(self) -> None:
        self.assertTrue(is_metadata_artifact(Path("._epoch=5-step=100.ckpt")))
        self.assertFalse(is_metadata_artifact(Path("epoch=5-step=100.ckpt")))


class FindLatestCheckpointTests(TestCase):
    """Tests for selecting the newest checkpoint in a training directory."""

    def setUp(self) -> None:
        """Create a lightning_logs tree in a temporary directory."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.checkpoints_dir = self.root / "lightning_logs" / "version_0" / "checkpoints"
        self.checkpoints_dir.mkdir(parents=True)

    def tearDown(self) -> None:
        """Clean up temporary directory."""
        self.temp_dir.cleanup()

    def _touch(self, name: str, directory: Path | None = None) -> Path:
        path = (directory or self.checkpoints_dir) / name
        path.touch()
        return path

    def test_selects_highest_epoch_numerically(self) -> None:
        """epoch=10 must win over epoch=9 even though it sorts first as text."""
        self._touch("epoch=9-step=900.ckpt")
        expected = self._touch("epoch=10-step=1000.ckpt")
        self._touch("epoch=2-step=200.ckpt")

        latest = find_latest_checkpoint(self.root)

        self.assertEqual(latest.path, expected)

    def test_uses_step_to_break_epoch_ties(self) -> None:
        self._touch("epoch=7-step=700.ckpt")
        expected = self._touch("epoch=7-step=750.ckpt")

        self.assertEqual(find_latest_checkpoint(self.root).path, expected)

    def test_ignores_metadata_artifacts(self) -> None:
        expected = self._touch("epoch=3-step=300.ckpt")
        self._touch("._epoch=99-step=9900.ckpt")

        self.assertEqual(find_latest_checkpoint(self.root).path, expected)

    def test_ignores_checkpoints_in_hidden_directories(self) -> None:
        expected = self._touch("epoch=3-step=300.ckpt")
        trash_dir = self.root / ".Trash"
        trash_dir.mkdir()
        self._touch("epoch=99-step=1.ckpt", trash_dir)

        self.assertEqual(find_latest_checkpoint(self.root).path, expected)

    def test_searches_all_lightning_versions(self) -> None:
        self._touch("epoch=3-step=300.ckpt")
        newer_dir = self.root / "lightning_logs" / "version_1" / "checkpoints"
        newer_dir.mkdir(parents=True)
        expected = self._touch("epoch=4-step=400.ckpt", newer_dir)

        self.assertEqual(find_latest_checkpoint(self.root).path, expected)

    def test_list_is_sorted_oldest_first(self) -> None:
        self._touch("epoch=12-step=1200.ckpt")
        self._touch("epoch=1-step=100.ckpt")
        self._touch("epoch=12-step=1200-v1.ckpt")
        self._touch("notes.txt")

        names = [c.path.name for c in list_checkpoints(self.root)]

        self.assertEqual(
            names,
            ["epoch=1-step=100.ckpt", "epoch=12-step=1200.ckpt", "epoch=12-step=1200-v1.ckpt"],
        )

    def test_raises_when_no_checkpoint_matches(self) -> None:
        self._touch("._epoch=1-step=100.ckpt")
        self._touch("last.ckpt")

        with self.assertRaises(CheckpointNotFoundError) as ctx:
            find_latest_checkpoint(self.root)

        self.assertIn("No checkpoint found", str(ctx.exception))

    def test_raises_for_missing_directory(self) -> None:
        with self.assertRaises(CheckpointNotFoundError):
            find_latest_checkpoint(self.root / "does_not_exist")

    def test_error_is_a_file_not_found_error(self) -> None:
        with self.assertRaises(FileNotFoundError):
            find_latest_checkpoint(self.root)


class LatestCheckpointScriptTests(TestCase):
    """Tests for the latest_checkpoint.py command-line tool."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_prints_latest_path(self) -> None:
        from latest_checkpoint import main

        (self.root / "epoch=1-step=10.ckpt").touch()
        expected = self.root / "epoch=2-step=20.ckpt"
        expected.touch()

        stdout = io.StringIO()
        with redirect_stdout(stdout):
            status = main([str(self.root)])

        self.assertEqual(status, 0)
        self.assertEqual(stdout.getvalue().strip(), str(expected))

    def test_exits_non_zero_without_checkpoints(self) -> None:
        from latest_checkpoint import main

        stderr = io.StringIO()
        with redirect_stderr(stderr):
            status = main([str(self.root)])

        self.assertEqual(status, 1)
        self.assertIn("Error: No checkpoint found", stderr.getvalue())
