#!/usr/bin/env python3
"""
Download the source recording with yt-dlp.

Only the audio stream is kept: yt-dlp fetches the best available audio
and its FFmpegExtractAudio post-processor converts it to the requested
container (WAV by default), ready for the preprocessing step.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from piper_voice.commands import ensure_ffmpeg_available
from piper_voice.errors import CommandError

DEFAULT_AUDIO_FORMAT = "wav"
DEFAULT_SOURCE_NAME = "source"

# Factory signature of yt_dlp.YoutubeDL: options dict -> context manager
DownloaderFactory = Callable[[dict[str, Any]], Any]


def build_download_options(
    output_dir: Path,
    name: str = DEFAULT_SOURCE_NAME,
    audio_format: str = DEFAULT_AUDIO_FORMAT,
) -> dict[str, Any]:
    """
    Build the yt-dlp options for an audio-only download.

    Args:
        output_dir: Directory where the audio file is written.
        name: File stem of the downloaded recording.
        audio_format: Container produced by the ffmpeg post-processor.

    Returns:
        Options dictionary for yt_dlp.YoutubeDL.
    """
    return {
        "format": "bestaudio/best",
        "noplaylist": True,
        "outtmpl": str(output_dir / f"{name}.%(ext)s"),
        "postprocessors": [
            {
                "key": "FFmpegExtractAudio",
                "preferredcodec": audio_format,
            }
        ],
        "quiet": False,
        "noprogress": False,
    }


def _default_downloader_factory(options: dict[str, Any]) -> Any:
    # Lazy import: yt-dlp is only needed for this step
    from yt_dlp import YoutubeDL

    return YoutubeDL(options)


def download_audio(
    url: str,
    output_dir: str | Path,
    name: str = DEFAULT_SOURCE_NAME,
    *,
    audio_format: str = DEFAULT_AUDIO_FORMAT,
    downloader_factory: DownloaderFactory | None = None,
) -> Path:
    """
    Download the audio track of a URL.

    Args:
        url: Video or audio page supported by yt-dlp.
        output_dir: Directory for the extracted audio (created if needed).
        name: File stem of the result.
        audio_format: Output container (wav, flac, mp3, ...).
        downloader_factory: Replacement for yt_dlp.YoutubeDL (used by tests).

    Returns:
        Path of the extracted audio file.

    Raises:
        MissingToolError: If ffmpeg is not installed.
        CommandError: If the download fails or produces no file.
    """
    from yt_dlp.utils import DownloadError

    ensure_ffmpeg_available()

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    options = build_download_options(output_dir, name, audio_format)
    factory = downloader_factory or _default_downloader_factory

    print(f"Downloading audio: {url}")
    try:
        with factory(options) as downloader:
            downloader.download([url])
    except DownloadError as exc:
        raise CommandError(f"Download failed for {url}: {exc}") from exc

    audio_path = output_dir / f"{name}.{audio_format}"
    if not audio_path.exists():
        raise CommandError(f"Download finished but {audio_path} was not created")

    print(f"Saved: {audio_path}")
    return audio_path
