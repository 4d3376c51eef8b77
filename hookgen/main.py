"""FastAPI backend for the video hook generator."""
import asyncio
import logging
import os
from typing import Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response

from hookgen.config import Settings, configure_logging
from hookgen.job_manager import job_manager
from hookgen.models import (
    HealthResponse,
    HookScript,
    JobStatus,
    JobStatusResponse,
    ScriptResponse,
)
from hookgen.pipeline import (
    HookGenerationError,
    VoiceoverError,
    WavSynthesisError,
    FrameCaptureError,
    capture_frames,
    cleanup_frames,
    encode_video,
    generate_hook_script,
    generate_voiceover,
    write_composition,
)

logger = logging.getLogger(__name__)

SAMPLE_SCRIPT = "This is a sample script for the video hook."

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Settings loaded once from the environment."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


# Initialize FastAPI app
app = FastAPI(
    title="Video Hook Generator API",
    description="Generate TikTok hook scripts, voiceovers and rendered hook videos",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def process_hook_video(job_id: str, settings: Settings, script: Optional[HookScript] = None):
    """
    Background task rendering one hook video.

    Steps:
        1. Generate the hook script unless one was supplied (progress 10%)
        2. Generate and save the voiceover (progress 30%)
        3. Write the HTML composition with the overlay caption (progress 40%)
        4. Capture frames in headless Chromium (progress 40-85%)
        5. Encode frames and voiceover with ffmpeg (progress 95%)
        6. Mark complete and remove the working directory
    """
    work_dir = settings.temp_dir / job_id
    try:
        await job_manager.advance_job(job_id, 5, "script", JobStatus.PROCESSING)

        if script is None:
            script = await generate_hook_script(settings)
            await job_manager.set_job_script(job_id, script)
        await job_manager.advance_job(job_id, 10, "voiceover")

        voiceover = await generate_voiceover(
            script.hook, settings, output_path=work_dir / "voiceover"
        )
        await job_manager.advance_job(job_id, 30, "composition")

        if not settings.background_video.exists():
            raise FrameCaptureError(
                f"Background video not found: {settings.background_video}. "
                "Set BACKGROUND_VIDEO to an MP4 file."
            )
        html_path = await write_composition(
            script.overlay, settings.background_video, work_dir / "index.html", settings
        )
        await job_manager.advance_job(job_id, 40, "frames")

        job = await job_manager.get_job(job_id)

        def on_progress(captured: int, total: int):
            if job is not None:
                job.advance(40 + (45 * captured) // total)

        await capture_frames(html_path, work_dir / "frames", settings, on_progress=on_progress)
        await job_manager.advance_job(job_id, 85, "encoding")

        output_path = settings.output_dir / f"{job_id}.mp4"
        await asyncio.to_thread(
            encode_video,
            work_dir / "frames",
            output_path,
            settings,
            voiceover.path,
        )
        await job_manager.advance_job(job_id, 95)

        await job_manager.mark_job_complete(job_id, str(output_path))

    except Exception as e:
        logger.exception("Hook video %s failed", job_id)
        await job_manager.mark_job_error(job_id, f"Video generation failed: {str(e)}")

    finally:
        if work_dir.exists():
            cleanup_frames(work_dir)


@app.get("/generate/script", response_model=ScriptResponse)
async def generate_script(settings: Settings = Depends(get_settings)):
    """Generate a hook line and its overlay caption."""
    try:
        script = await generate_hook_script(settings)
    except HookGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ScriptResponse(script=script)


@app.get("/generate/voiceover")
async def generate_voiceover_audio(
    script: str = SAMPLE_SCRIPT,
    settings: Settings = Depends(get_settings),
):
    """
    Generate a voiceover for ``script`` and return it as a download.

    Headerless PCM from the speech model is wrapped in a WAV container.
    """
    logger.info("Received voiceover request")
    if not script.strip():
        raise HTTPException(status_code=400, detail="Script must not be blank")
    try:
        voiceover = await generate_voiceover(
            script, settings, output_path=settings.output_dir / "audio_output"
        )
    except WavSynthesisError as e:
        logger.error("Unusable audio from speech service: %s", e)
        raise HTTPException(status_code=502, detail={"kind": e.kind, "message": str(e)})
    except VoiceoverError as e:
        logger.error("Error generating audio voiceover: %s", e)
        raise HTTPException(status_code=500, detail="Failed to generate audio")

    return Response(
        content=voiceover.audio,
        media_type=voiceover.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="voiceover.{voiceover.extension}"'
        },
    )


@app.get("/generate/video", response_model=JobStatusResponse)
async def generate_video(
    background_tasks: BackgroundTasks,
    script: Optional[str] = None,
    overlay: Optional[str] = None,
    settings: Settings = Depends(get_settings),
):
    """
    Start rendering a full hook video.

    Pass both ``script`` and ``overlay`` to skip script generation.
    Poll ``/api/jobs/{job_id}`` for progress.
    """
    if bool(script) != bool(overlay):
        raise HTTPException(
            status_code=400,
            detail="Provide both 'script' and 'overlay', or neither"
        )
    hook = HookScript(hook=script, overlay=overlay) if script else None

    await job_manager.cleanup_old_jobs()
    job_id = await job_manager.create_job(hook)
    background_tasks.add_task(process_hook_video, job_id, settings, hook)

    return JobStatusResponse(
        job_id=job_id,
        status=JobStatus.QUEUED,
        progress=0
    )


@app.get("/api/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: str):
    """
    Get the status of a hook video job.

    Poll this endpoint to track progress.
    """
    job = await job_manager.get_job(job_id)

    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    video_url = None
    if job.status == JobStatus.COMPLETE and job.video_path:
        video_url = f"/api/videos/{job_id}"

    return JobStatusResponse(
        job_id=job.job_id,
        status=job.status,
        progress=job.progress,
        stage=job.stage,
        hook=job.hook,
        overlay=job.overlay,
        video_url=video_url,
        error=job.error
    )


@app.get("/api/videos/{video_id}")
async def download_video(video_id: str):
    """Download a finished hook video."""
    job = await job_manager.get_job(video_id)

    if not job:
        raise HTTPException(status_code=404, detail="Video not found")

    if job.status != JobStatus.COMPLETE or not job.video_path:
        raise HTTPException(
            status_code=400,
            detail=f"Video is not ready. Current status: {job.status.value}"
        )

    if not os.path.exists(job.video_path):
        raise HTTPException(
            status_code=500,
            detail="Video file not found on server"
        )

    return FileResponse(
        job.video_path,
        media_type="video/mp4",
        filename=f"hook_{video_id}.mp4"
    )


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="ok")


@app.on_event("startup")
async def startup_event():
    """Create working directories and report configuration."""
    configure_logging()
    settings = get_settings()
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    settings.temp_dir.mkdir(parents=True, exist_ok=True)

    logger.info("Video Hook Generator API starting...")
    logger.info("Output directory: %s", settings.output_dir)
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; script generation will fail")
    if not settings.background_video.exists():
        logger.warning("Background video %s not found; /generate/video will fail", settings.background_video)


def run():
    """Console entry point: serve the API with uvicorn."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    run()
