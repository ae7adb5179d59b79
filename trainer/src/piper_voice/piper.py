#!/usr/bin/env python3
"""
Command lines for the Piper training toolchain.

piper_train is installed into its own (usually older) Python environment,
so every step runs as `<python> -m piper_train...` in a subprocess rather
than being imported. The interpreter comes from settings.PYTHON_EXECUTABLE.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from piper_voice.checkpoints import list_checkpoints
from piper_voice.commands import CommandRunner, run_command
from piper_voice.errors import CheckpointNotFoundError, DatasetError
from piper_voice.models import AudioConfig, TrainingConfig

LIGHTNING_LOGS_DIR = "lightning_logs"
TRAINING_CONFIG_FILE = "config.json"
ONNX_SUFFIX = ".onnx"
BYTES_TO_GB = 1e9


# =============================================================================
# Preprocessing
# =============================================================================


def build_preprocess_command(
    python: str,
    dataset_dir: Path,
    training_dir: Path,
    training: TrainingConfig,
    audio: AudioConfig,
) -> list[str]:
    """Phonemize the LJSpeech dataset into piper_train's dataset.jsonl."""
    return [
        python,
        "-m",
        "piper_train.preprocess",
        "--language",
        training.espeak_language,
        "--input-dir",
        str(dataset_dir),
        "--output-dir",
        str(training_dir),
        "--dataset-format",
        "ljspeech",
        "--single-speaker",
        "--sample-rate",
        str(audio.sample_rate),
    ]


# =============================================================================
# Training
# =============================================================================


def print_gpu_info() -> None:
    """Print GPU availability and specifications."""
    import torch

    print(f"GPU Available: {torch.cuda.is_available()}")
    if torch.cuda.is_available():
        print(f"GPU: {torch.cuda.get_device_name(0)}")
        vram_gb = torch.cuda.get_device_properties(0).total_memory / BYTES_TO_GB
        print(f"VRAM: {vram_gb:.1f} GB")


def detect_accelerator(requested: str) -> str:
    """Resolve 'auto' to 'gpu' when CUDA is available, else 'cpu'."""
    if requested != "auto":
        return requested

    # Lazy import: torch is heavy, only load when resolving the device
    import torch

    return "gpu" if torch.cuda.is_available() else "cpu"


def resolve_resume_checkpoint(
    training_dir: Path,
    base_checkpoint: Path | None,
) -> Path | None:
    """
    Pick the checkpoint training continues from.

    The newest checkpoint of a previous run in training_dir wins; otherwise
    the pretrained base checkpoint is fine-tuned; with neither, training
    starts from scratch (None).

    Raises:
        CheckpointNotFoundError: If base_checkpoint is set but missing.
    """
    own = list_checkpoints(training_dir / LIGHTNING_LOGS_DIR)
    if own:
        return own[-1].path

    if base_checkpoint is not None:
        if not base_checkpoint.is_file():
            raise CheckpointNotFoundError(f"Base checkpoint not found: {base_checkpoint}")
        return base_checkpoint

    return None


def build_train_command(
    python: str,
    training_dir: Path,
    training: TrainingConfig,
    accelerator: str,
    resume_from: Path | None = None,
) -> list[str]:
    """Build the piper_train invocation (Lightning flags included)."""
    command = [
        python,
        "-m",
        "piper_train",
        "--dataset-dir",
        str(training_dir),
        "--accelerator",
        accelerator,
        "--devices",
        str(training.devices),
        "--batch-size",
        str(training.batch_size),
        "--validation-split",
        str(training.validation_split),
        "--num-test-examples",
        str(training.num_test_examples),
        "--max_epochs",
        str(training.max_epochs),
        "--checkpoint-epochs",
        str(training.checkpoint_epochs),
        "--precision",
        training.precision,
        "--quality",
        training.quality,
    ]
    if resume_from is not None:
        command.extend(["--resume_from_checkpoint", str(resume_from)])
    return command


# =============================================================================
# Export
# =============================================================================


def build_export_command(python: str, checkpoint: Path, onnx_path: Path) -> list[str]:
    return [python, "-m", "piper_train.export_onnx", str(checkpoint), str(onnx_path)]


def export_model(
    python: str,
    checkpoint: Path,
    training_dir: Path,
    output_dir: Path,
    voice_name: str,
    *,
    runner: CommandRunner | None = None,
) -> tuple[Path, Path]:
    """
    Export a checkpoint to ONNX and write the config sidecar.

    Piper loads <voice>.onnx together with <voice>.onnx.json, which is the
    config.json that piper_train.preprocess wrote into the training dir.

    Returns:
        Tuple of (onnx_path, config_path).

    Raises:
        DatasetError: If the training directory has no config.json.
        CommandError: If the export fails.
    """
    training_config = training_dir / TRAINING_CONFIG_FILE
    if not training_config.is_file():
        raise DatasetError(
            f"{training_config} not found; run preprocessing before exporting"
        )

    output_dir.mkdir(parents=True, exist_ok=True)
    onnx_path = output_dir / f"{voice_name}{ONNX_SUFFIX}"
    config_path = output_dir / f"{voice_name}{ONNX_SUFFIX}.json"

    run_command(build_export_command(python, checkpoint, onnx_path), runner=runner)
    shutil.copyfile(training_config, config_path)

    return onnx_path, config_path


# =============================================================================
# Sample Synthesis
# =============================================================================


def build_synthesis_command(piper: str, model: Path, output_file: Path) -> list[str]:
    return [piper, "--model", str(model), "--output_file", str(output_file)]


def synthesize_sample(
    piper: str,
    model: Path,
    text: str,
    output_file: Path,
    *,
    runner: CommandRunner | None = None,
) -> Path:
    """Speak text with the exported voice; piper reads the text from stdin."""
    output_file.parent.mkdir(parents=True, exist_ok=True)
    run_command(
        build_synthesis_command(piper, model, output_file),
        runner=runner,
        input_text=text,
    )
    return output_file
