"""Tests for the HTML hook composition."""
import pytest

from hookgen.config import Settings
from hookgen.pipeline.composition import render_composition, write_composition


def test_render_includes_overlay_video_and_size(tmp_path):
    video = tmp_path / "background.mp4"
    html = render_composition("Stop making pins from scratch", video, Settings(width=720, height=1280))

    assert "Stop making pins from scratch" in html
    assert video.resolve().as_uri() in html
    assert "width: 720px" in html
    assert "height: 1280px" in html
    assert "<video" in html


def test_overlay_is_escaped(tmp_path):
    html = render_composition("<b>Pins & more</b>", tmp_path / "bg.mp4", Settings())

    assert "<b>Pins" not in html
    assert "&lt;b&gt;Pins &amp; more&lt;/b&gt;" in html


@pytest.mark.asyncio
async def test_write_composition(tmp_path):
    output = tmp_path / "job" / "index.html"

    path = await write_composition("Hook text", tmp_path / "bg.mp4", output, Settings())

    assert path == output
    assert "Hook text" in output.read_text(encoding="utf-8")
