"""Tests for frame-by-frame capture with a mocked Playwright browser."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hookgen.config import Settings
from hookgen.pipeline.frame_capture import (
    FrameCaptureError,
    capture_frames,
    frame_timestamps,
)


class TestFrameTimestamps:

    def test_evenly_spaced(self):
        assert frame_timestamps(2.0, 4) == [0.0, 0.5, 1.0, 1.5]

    def test_default_hook_length(self):
        stamps = frame_timestamps(14.0, 30 * 7)
        assert len(stamps) == 210
        assert stamps[0] == 0.0
        assert stamps[-1] < 14.0

    def test_no_frames(self):
        assert frame_timestamps(5.0, 0) == []


def _mock_playwright(video_duration):
    """Build an ``async_playwright()`` replacement and return (factory, page, browser)."""
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.screenshot = AsyncMock()
    # First evaluate call returns the duration; seeks and waits return None
    page.evaluate = AsyncMock(side_effect=lambda script, *args: video_duration if "loadedmetadata" in script else None)

    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=playwright)
    context.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=context), page, browser, playwright


@pytest.mark.asyncio
async def test_captures_one_screenshot_per_frame(tmp_path):
    settings = Settings(fps=2, duration_seconds=2, width=540, height=960, frame_settle_ms=10)
    factory, page, browser, playwright = _mock_playwright(video_duration=8.0)
    progress = []

    with patch("hookgen.pipeline.frame_capture.async_playwright", factory):
        frames = await capture_frames(
            tmp_path / "index.html", tmp_path / "frames", settings,
            on_progress=lambda done, total: progress.append((done, total)),
        )

    assert [f.name for f in frames] == ["frame_0000.png", "frame_0001.png", "frame_0002.png", "frame_0003.png"]
    assert (tmp_path / "frames").is_dir()

    launch_kwargs = playwright.chromium.launch.call_args.kwargs
    assert launch_kwargs["headless"] is True
    assert "--autoplay-policy=no-user-gesture-required" in launch_kwargs["args"]
    browser.new_page.assert_awaited_once_with(viewport={"width": 540, "height": 960})
    page.goto.assert_awaited_once_with((tmp_path / "index.html").resolve().as_uri())

    seek_times = [c.args[1] for c in page.evaluate.await_args_list if len(c.args) == 2]
    assert seek_times == [0.0, 2.0, 4.0, 6.0]
    page.wait_for_timeout.assert_awaited_with(10)
    assert page.screenshot.await_count == 4
    assert progress[-1] == (4, 4)
    browser.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_missing_duration_raises_and_closes_browser(tmp_path):
    factory, page, browser, _ = _mock_playwright(video_duration=None)

    with patch("hookgen.pipeline.frame_capture.async_playwright", factory):
        with pytest.raises(FrameCaptureError, match="no duration"):
            await capture_frames(tmp_path / "index.html", tmp_path / "frames", Settings())

    page.screenshot.assert_not_awaited()
    browser.close.assert_awaited_once()
