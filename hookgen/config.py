"""Runtime settings for the hook generator, read from the environment."""
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

BASE_DIR = Path(__file__).parent


class Settings(BaseModel):
    """Explicit configuration passed to every pipeline step that needs it."""

    gemini_api_key: Optional[str] = Field(None, description="Google Gemini API key")
    script_model: str = "gemini-2.0-flash"
    tts_model: str = "gemini-2.5-pro-preview-tts"
    tts_voice: str = "Autonoe"
    tts_temperature: float = 1.5
    # edge-tts voice used when Gemini speech generation fails
    fallback_voice: Optional[str] = "en-US-JennyNeural"

    fps: int = Field(30, gt=0)
    duration_seconds: int = Field(7, gt=0)
    width: int = Field(1080, gt=0)
    height: int = Field(1920, gt=0)
    # settle delay after each seek before the screenshot
    frame_settle_ms: int = Field(50, ge=0)

    output_dir: Path = BASE_DIR / "output"
    temp_dir: Path = BASE_DIR / "temp"
    background_video: Path = BASE_DIR / "assets" / "background.mp4"
    ffmpeg_binary: str = "ffmpeg"

    port: int = 8080

    @property
    def frame_count(self) -> int:
        return self.fps * self.duration_seconds

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and a ``.env`` file if present)."""
        load_dotenv()
        env = os.environ
        values = {
            "gemini_api_key": env.get("GEMINI_API_KEY"),
            "script_model": env.get("GEMINI_SCRIPT_MODEL"),
            "tts_model": env.get("GEMINI_TTS_MODEL"),
            "tts_voice": env.get("GEMINI_TTS_VOICE"),
            "tts_temperature": env.get("GEMINI_TTS_TEMPERATURE"),
            "fallback_voice": env.get("FALLBACK_VOICE"),
            "fps": env.get("HOOK_FPS"),
            "duration_seconds": env.get("HOOK_DURATION_SECONDS"),
            "width": env.get("HOOK_WIDTH"),
            "height": env.get("HOOK_HEIGHT"),
            "output_dir": env.get("OUTPUT_DIR"),
            "temp_dir": env.get("TEMP_DIR"),
            "background_video": env.get("BACKGROUND_VIDEO"),
            "ffmpeg_binary": env.get("FFMPEG_BINARY"),
            "port": env.get("PORT"),
        }
        # Unset variables fall back to the field defaults
        return cls(**{key: value for key, value in values.items() if value is not None})


def configure_logging(level: Optional[str] = None):
    """Set up root logging once for the API process."""
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
