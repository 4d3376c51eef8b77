"""Frame-by-frame capture of the HTML composition with headless Chromium."""
import logging
from pathlib import Path
from typing import Callable, List, Optional

from playwright.async_api import async_playwright

from hookgen.config import Settings

logger = logging.getLogger(__name__)

FRAME_PATTERN = "frame_%04d.png"

_VIDEO_DURATION_JS = """() => {
    const vid = document.querySelector("video");
    return new Promise((resolve) => {
        if (vid.readyState >= 1) {
            resolve(vid.duration);
        } else {
            vid.addEventListener("loadedmetadata", () => resolve(vid.duration));
        }
    });
}"""

_SEEK_JS = """(time) => {
    document.querySelector("video").currentTime = time;
}"""

_WAIT_FOR_DATA_JS = """() => {
    const vid = document.querySelector("video");
    return new Promise((resolve) => {
        if (vid.readyState >= 2) {
            resolve(true);
        } else {
            vid.addEventListener("canplay", () => resolve(true), { once: true });
        }
    });
}"""


class FrameCaptureError(RuntimeError):
    """The composition could not be rendered to frames."""


def frame_timestamps(video_duration: float, frame_count: int) -> List[float]:
    """Seek positions that spread ``frame_count`` frames evenly over the video."""
    if frame_count <= 0:
        return []
    time_per_frame = video_duration / frame_count
    return [i * time_per_frame for i in range(frame_count)]


async def capture_frames(
    html_path: Path,
    frame_dir: Path,
    settings: Settings,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[Path]:
    """
    Screenshot the composition once per output frame.

    For every frame the background video is seeked to its timestamp, the
    page waits for the video to have data at that position plus a short
    settle delay, then the viewport is saved as ``frame_%04d.png``.

    Args:
        html_path: Composition HTML containing a ``<video>`` element
        frame_dir: Directory for the PNG frames (created if missing)
        settings: Viewport size, fps, duration and settle delay
        on_progress: Optional callback ``(captured, total)``

    Returns:
        Paths of the captured frames in order

    Raises:
        FrameCaptureError: If the page has no playable video
    """
    frame_dir = Path(frame_dir)
    frame_dir.mkdir(parents=True, exist_ok=True)
    frame_count = settings.frame_count
    frames = []

    async with async_playwright() as p:
        browser = await p.chromium.launch(
            headless=True,
            args=["--autoplay-policy=no-user-gesture-required"],
        )
        try:
            page = await browser.new_page(
                viewport={"width": settings.width, "height": settings.height}
            )
            await page.goto(Path(html_path).resolve().as_uri())
            await page.wait_for_selector("video")

            video_duration = await page.evaluate(_VIDEO_DURATION_JS)
            if not video_duration or video_duration != video_duration:  # None or NaN
                raise FrameCaptureError(f"Background video in {html_path} has no duration")
            logger.info("Video duration: %.2f seconds", video_duration)

            for i, current_time in enumerate(frame_timestamps(video_duration, frame_count)):
                await page.evaluate(_SEEK_JS, current_time)
                await page.evaluate(_WAIT_FOR_DATA_JS)
                await page.wait_for_timeout(settings.frame_settle_ms)

                frame_path = frame_dir / (FRAME_PATTERN % i)
                await page.screenshot(path=str(frame_path))
                frames.append(frame_path)

                logger.debug("Captured frame %d/%d at %.2fs", i + 1, frame_count, current_time)
                if on_progress:
                    on_progress(i + 1, frame_count)
        finally:
            await browser.close()

    logger.info("Captured %d frames into %s", len(frames), frame_dir)
    return frames
