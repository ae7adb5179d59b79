#!/usr/bin/env python3
"""
Export a trained Piper checkpoint to ONNX.

Writes <voice>.onnx and its <voice>.onnx.json config sidecar, the pair
the piper runtime loads. Optionally speaks a test sentence with the
exported voice.

Usage (from trainer/ directory):
    python scripts/export_onnx.py --config ../config/train_config.json
    python scripts/export_onnx.py --checkpoint path/to/epoch=2999-step=1000.ckpt
    python scripts/export_onnx.py --config ../config/train_config.json --test-text "Hello there."
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from piper_voice.checkpoints import find_latest_checkpoint
from piper_voice.config import settings
from piper_voice.errors import VoiceTrainerError
from piper_voice.models import load_config
from piper_voice.piper import LIGHTNING_LOGS_DIR, export_model, synthesize_sample


def main() -> None:
    """Parse arguments, export the checkpoint and optionally test the voice."""
    parser = argparse.ArgumentParser(description="Export a Piper checkpoint to ONNX")
    parser.add_argument("--config", default=None, help="Pipeline config JSON")
    parser.add_argument(
        "--checkpoint", default=None, help="Checkpoint to export (default: latest)"
    )
    parser.add_argument("--voice-name", default=None, help="Output voice name")
    parser.add_argument(
        "--python", default=settings.PYTHON_EXECUTABLE, help="Interpreter with piper_train"
    )
    parser.add_argument("--test-text", default=None, help="Sentence to synthesize after export")
    args = parser.parse_args()

    try:
        config = load_config(args.config)

        if args.checkpoint:
            checkpoint = Path(args.checkpoint)
            if not checkpoint.is_file():
                raise FileNotFoundError(f"Checkpoint not found: {checkpoint}")
        else:
            checkpoint = find_latest_checkpoint(config.training_dir / LIGHTNING_LOGS_DIR).path
        print(f"Exporting: {checkpoint}")

        voice_name = args.voice_name or config.export.voice_name
        onnx_path, config_path = export_model(
            args.python,
            checkpoint,
            config.training_dir,
            config.export.output_dir,
            voice_name,
        )
        print(f"✓ Model: {onnx_path}")
        print(f"✓ Config: {config_path}")

        if args.test_text:
            sample = synthesize_sample(
                settings.PIPER_EXECUTABLE,
                onnx_path,
                args.test_text,
                config.export.output_dir / f"{voice_name}_sample.wav",
            )
            print(f"✓ Sample: {sample}")
    except (VoiceTrainerError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
