"""HTML composition for the hook: background video with the overlay caption."""
import html
import logging
from pathlib import Path
from string import Template

import aiofiles

from hookgen.config import Settings

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).parent.parent / "templates" / "hook.html"


def render_composition(overlay: str, video_path: Path, settings: Settings) -> str:
    """
    Fill the hook template with the caption and background video.

    The overlay is HTML-escaped; the video is referenced by ``file://`` URI
    so the page can be opened straight from disk.
    """
    template = Template(TEMPLATE_PATH.read_text(encoding="utf-8"))
    return template.substitute(
        width=settings.width,
        height=settings.height,
        video_src=html.escape(Path(video_path).resolve().as_uri(), quote=True),
        overlay=html.escape(overlay),
    )


async def write_composition(overlay: str, video_path: Path, output_path: Path, settings: Settings) -> Path:
    """Render the composition and save it as an HTML file."""
    content = render_composition(overlay, video_path, settings)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(output_path, "w", encoding="utf-8") as f:
        await f.write(content)
    logger.info("Wrote composition to %s", output_path)
    return output_path
