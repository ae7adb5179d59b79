#!/usr/bin/env python3
"""Unit tests for clip preparation (silence removal, segmentation, output)."""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path
from unittest import TestCase, mock

import numpy as np
import soundfile as sf

# Ensure the trainer module paths are available for imports
TRAINER_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = TRAINER_DIR / "src"
SCRIPTS_DIR = TRAINER_DIR / "scripts"
for path in [str(SRC_DIR), str(SCRIPTS_DIR)]:
    if path not in sys.path:
        sys.path.insert(0, path)

from piper_voice.audio import (  # noqa: E402
    process_recording,
    remove_silence,
    segment_audio,
    write_clips,
)
from piper_voice.errors import DatasetError  # noqa: E402
from piper_voice.models import AudioConfig  # noqa: E402

SR = 22050


def tone(seconds: float, sr: int = SR, freq: float = 220.0) -> np.ndarray:
    """Sine wave at half amplitude."""
    t = np.arange(int(seconds * sr), dtype=np.float32) / sr
    return (0.5 * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def silence(seconds: float, sr: int = SR) -> np.ndarray:
    return np.zeros(int(seconds * sr), dtype=np.float32)


class RemoveSilenceTests(TestCase):
    """Tests for cutting silent stretches out of a recording."""

    def test_long_gap_is_removed(self) -> None:
        audio = np.concatenate([tone(0.5), silence(1.0), tone(0.5)])

        result = remove_silence(
            audio, SR, top_db=40, min_silence_seconds=0.5, keep_silence_seconds=0.1
        )

        self.assertGreaterEqual(len(result), int(1.0 * SR))
        self.assertLess(len(result), int(1.6 * SR))

    def test_short_pause_is_kept(self) -> None:
        audio = np.concatenate([tone(0.5), silence(0.2), tone(0.5)])

        result = remove_silence(
            audio, SR, top_db=40, min_silence_seconds=0.5, keep_silence_seconds=0.1
        )

        self.assertEqual(len(result), len(audio))

    def test_padding_never_duplicates_audio(self) -> None:
        """Padding wider than half the gap must not copy samples twice."""
        audio = np.concatenate([tone(0.5), silence(0.3), tone(0.5)])

        result = remove_silence(
            audio, SR, top_db=40, min_silence_seconds=0.2, keep_silence_seconds=0.25
        )

        self.assertLessEqual(len(result), len(audio))

    def test_no_audible_interval_returns_empty(self) -> None:
        audio = tone(1.0)

        with mock.patch(
            "piper_voice.audio.librosa.effects.split",
            return_value=np.zeros((0, 2), dtype=int),
        ):
            result = remove_silence(
                audio, SR, top_db=40, min_silence_seconds=0.5, keep_silence_seconds=0.1
            )

        self.assertEqual(result.size, 0)

    def test_empty_input_returns_empty(self) -> None:
        result = remove_silence(
            np.zeros(0, dtype=np.float32),
            SR,
            top_db=40,
            min_silence_seconds=0.5,
            keep_silence_seconds=0.1,
        )

        self.assertEqual(result.size, 0)


class SegmentAudioTests(TestCase):
    """Tests for fixed-length segmentation."""

    def test_splits_into_fixed_length_clips(self) -> None:
        audio = np.arange(2500, dtype=np.float32)

        clips = segment_audio(audio, sr=100, clip_seconds=10.0)

        self.assertEqual([len(c) for c in clips], [1000, 1000, 500])
        np.testing.assert_array_equal(clips[1], audio[1000:2000])

    def test_drops_short_remainder(self) -> None:
        audio = np.arange(2500, dtype=np.float32)

        clips = segment_audio(audio, sr=100, clip_seconds=10.0, min_clip_seconds=6.0)

        self.assertEqual([len(c) for c in clips], [1000, 1000])

    def test_exact_multiple_has_no_remainder(self) -> None:
        clips = segment_audio(np.zeros(3000, dtype=np.float32), sr=100, clip_seconds=10.0)

        self.assertEqual(len(clips), 3)

    def test_rejects_non_positive_clip_length(self) -> None:
        with self.assertRaises(ValueError):
            segment_audio(np.zeros(10, dtype=np.float32), sr=100, clip_seconds=0)


class WriteClipsTests(TestCase):
    """Tests for writing clips in the trainer's WAV format."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = Path(self.temp_dir.name) / "wavs"

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_writes_numbered_pcm16_mono_files(self) -> None:
        clips = [tone(1.0), tone(0.5)]

        written = write_clips(clips, SR, self.output_dir)

        self.assertEqual([c.clip_id for c in written], ["clip_0001", "clip_0002"])
        self.assertAlmostEqual(written[1].duration_seconds, 0.5, places=3)

        info = sf.info(str(self.output_dir / "clip_0001.wav"))
        self.assertEqual(info.samplerate, SR)
        self.assertEqual(info.channels, 1)
        self.assertEqual(info.subtype, "PCM_16")


class ProcessRecordingTests(TestCase):
    """Tests for the full recording-to-clips pipeline."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = Path(self.temp_dir.name) / "wavs"

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    @mock.patch("piper_voice.audio.librosa.load")
    def test_writes_clips_and_drops_short_tail(self, mock_load: mock.MagicMock) -> None:
        mock_load.return_value = (tone(3.2), SR)
        config = AudioConfig(sample_rate=SR, clip_seconds=1.0, min_clip_seconds=1.0)

        written = process_recording("source.wav", self.output_dir, config)

        mock_load.assert_called_once_with("source.wav", sr=None, mono=True)
        self.assertEqual(len(written), 3)
        self.assertEqual(len(list(self.output_dir.glob("*.wav"))), 3)

    @mock.patch("piper_voice.audio.sf.write")
    @mock.patch("piper_voice.audio.nr.reduce_noise")
    @mock.patch("piper_voice.audio.librosa.resample")
    @mock.patch("piper_voice.audio.librosa.load")
    def test_resamples_and_denoises_when_configured(
        self,
        mock_load: mock.MagicMock,
        mock_resample: mock.MagicMock,
        mock_reduce_noise: mock.MagicMock,
        mock_write: mock.MagicMock,
    ) -> None:
        """Ensure the pipeline resamples to the target rate before denoising."""
        source = tone(2.0, sr=44100)
        resampled = tone(2.0)
        mock_load.return_value = (source, 44100)
        mock_resample.return_value = resampled
        mock_reduce_noise.return_value = resampled
        config = AudioConfig(
            sample_rate=SR, clip_seconds=1.0, denoise=True, noise_reduction=0.7
        )

        written = process_recording("source.mp3", self.output_dir, config)

        mock_resample.assert_called_once()
        self.assertEqual(mock_resample.call_args.kwargs, {"orig_sr": 44100, "target_sr": SR})
        mock_reduce_noise.assert_called_once_with(y=resampled, sr=SR, prop_decrease=0.7)
        self.assertEqual(len(written), 2)
        self.assertEqual(mock_write.call_count, 2)
        self.assertEqual(mock_write.call_args.kwargs.get("subtype"), "PCM_16")

    @mock.patch("piper_voice.audio.librosa.load")
    def test_raises_when_nothing_is_left(self, mock_load: mock.MagicMock) -> None:
        mock_load.return_value = (np.zeros(0, dtype=np.float32), SR)
        config = AudioConfig(sample_rate=SR)

        with self.assertRaises(DatasetError):
            process_recording("silent.wav", self.output_dir, config)


class PreprocessAudioScriptTests(TestCase):
    """Tests for preprocess_audio.py."""

    def test_missing_input_raises(self) -> None:
        from preprocess_audio import preprocess_audio

        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(FileNotFoundError):
                preprocess_audio(Path(tmpdir) / "missing.wav", tmpdir, AudioConfig())

    @mock.patch("preprocess_audio.process_recording")
    def test_writes_into_wavs_subdirectory(self, mock_process: mock.MagicMock) -> None:
        from preprocess_audio import preprocess_audio

        with tempfile.TemporaryDirectory() as tmpdir:
            source = Path(tmpdir) / "source.wav"
            source.touch()
            config = AudioConfig()

            preprocess_audio(source, tmpdir, config)

            mock_process.assert_called_once_with(source, Path(tmpdir) / "wavs", config, "clip")
