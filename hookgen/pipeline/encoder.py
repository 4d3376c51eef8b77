"""Frame sequence to MP4 encoding with ffmpeg."""
import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from hookgen.config import Settings
from hookgen.pipeline.frame_capture import FRAME_PATTERN

logger = logging.getLogger(__name__)


class EncodingError(RuntimeError):
    """ffmpeg could not produce the video."""


def build_ffmpeg_command(
    frame_dir: Path,
    output_path: Path,
    settings: Settings,
    audio_path: Optional[Path] = None,
) -> List[str]:
    """Command line that encodes ``frame_dir/frame_%04d.png`` (plus optional audio)."""
    command = [
        settings.ffmpeg_binary, "-y",
        "-framerate", str(settings.fps),
        "-i", str(Path(frame_dir) / FRAME_PATTERN),
    ]
    if audio_path is not None:
        command += ["-i", str(audio_path), "-c:a", "aac", "-shortest"]
    command += ["-pix_fmt", "yuv420p", str(output_path)]
    return command


def encode_video(
    frame_dir: Path,
    output_path: Path,
    settings: Settings,
    audio_path: Optional[Path] = None,
) -> Path:
    """
    Encode captured frames into an H.264 MP4.

    Raises:
        EncodingError: If ffmpeg is missing or exits non-zero
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    command = build_ffmpeg_command(frame_dir, output_path, settings, audio_path)

    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise EncodingError(f"ffmpeg not found: {settings.ffmpeg_binary}") from e

    if result.returncode != 0:
        raise EncodingError(f"ffmpeg failed: {result.stderr[-500:]}")

    logger.info("Video created: %s", output_path)
    return output_path


def cleanup_frames(frame_dir: Path) -> bool:
    """Delete the frame directory; failures are logged, not raised."""
    try:
        shutil.rmtree(frame_dir)
    except OSError as e:
        logger.error("Error cleaning up frames directory %s: %s", frame_dir, e)
        return False
    logger.info("Cleaned up frames directory %s", frame_dir)
    return True
