"""Voiceover generation using Gemini speech with an edge-tts fallback."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import aiofiles
import edge_tts
from google import genai
from google.genai import types

from hookgen.config import Settings
from hookgen.pipeline.hook_writer import make_client
from hookgen.pipeline.wav_header import audio_extension, pcm_to_wav

logger = logging.getLogger(__name__)


class VoiceoverError(RuntimeError):
    """No audio could be produced for the script."""


@dataclass
class Voiceover:
    """Playable audio for a hook script."""
    audio: bytes
    extension: str
    mime_type: str
    path: Optional[Path] = None

    @property
    def content_type(self) -> str:
        return f"audio/{self.extension}"


def to_playable(data: bytes, mime_type: str) -> Voiceover:
    """
    Turn audio returned by the speech model into a playable file body.

    Containers with a known extension are passed through untouched;
    headerless PCM (``audio/L16;rate=24000``) gets a WAV header.
    """
    extension = audio_extension(mime_type)
    if extension:
        return Voiceover(audio=data, extension=extension, mime_type=mime_type)
    return Voiceover(audio=pcm_to_wav(data, mime_type), extension="wav", mime_type="audio/wav")


async def _gemini_speech(
    script: str, settings: Settings, client: genai.Client
) -> Tuple[bytes, str]:
    """Stream speech from Gemini and join the inline audio chunks."""
    config = types.GenerateContentConfig(
        temperature=settings.tts_temperature,
        response_modalities=["audio"],
        speech_config=types.SpeechConfig(
            voice_config=types.VoiceConfig(
                prebuilt_voice_config=types.PrebuiltVoiceConfig(
                    voice_name=settings.tts_voice,
                )
            )
        ),
    )
    contents = [types.Content(role="user", parts=[types.Part(text=script)])]

    audio_chunks: List[bytes] = []
    mime_type = None
    stream = await client.aio.models.generate_content_stream(
        model=settings.tts_model,
        contents=contents,
        config=config,
    )
    async for chunk in stream:
        if (
            not chunk.candidates
            or not chunk.candidates[0].content
            or not chunk.candidates[0].content.parts
        ):
            continue
        inline_data = chunk.candidates[0].content.parts[0].inline_data
        if inline_data is None or not inline_data.data:
            continue
        mime_type = mime_type or inline_data.mime_type or ""
        audio_chunks.append(inline_data.data)

    logger.info("Received %d audio chunk(s) of type %r", len(audio_chunks), mime_type)
    return b"".join(audio_chunks), mime_type or ""


async def _edge_speech(script: str, voice: str) -> Optional[Voiceover]:
    """Synthesize MP3 speech with Microsoft Edge TTS."""
    communicate = edge_tts.Communicate(script, voice)
    audio_chunks = []
    async for chunk in communicate.stream():
        if chunk["type"] == "audio":
            audio_chunks.append(chunk["data"])

    if not audio_chunks:
        return None
    return Voiceover(audio=b"".join(audio_chunks), extension="mp3", mime_type="audio/mpeg")


async def save_voiceover(voiceover: Voiceover, output_path: Path) -> Path:
    """Write the audio next to ``output_path`` using the voiceover's own extension."""
    path = Path(output_path).with_suffix(f".{voiceover.extension}")
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "wb") as f:
        await f.write(voiceover.audio)
    voiceover.path = path
    logger.info("Saved voiceover to %s", path)
    return path


async def generate_voiceover(
    script: str,
    settings: Settings,
    client: Optional[genai.Client] = None,
    output_path: Optional[Path] = None,
) -> Voiceover:
    """
    Generate a spoken voiceover for ``script``.

    Gemini speech is tried first. If the request itself fails (or returns
    no audio) and ``settings.fallback_voice`` is set, edge-tts is used.
    Encoding errors from the returned audio are not retried; they mean the
    service answered with a format we cannot wrap.

    Args:
        script: Text to speak
        settings: Models, voice and temperature to use
        client: Optional pre-built Gemini client
        output_path: If given, the audio is saved there (suffix replaced)

    Returns:
        Voiceover with the audio bytes and file extension

    Raises:
        VoiceoverError: If no engine produced audio
        WavSynthesisError: If Gemini returned PCM with an unusable MIME type
    """
    if not script or not script.strip():
        raise VoiceoverError("Script is empty")

    voiceover = None
    speech_error: Optional[Exception] = None
    try:
        audio, mime_type = await _gemini_speech(script, settings, client or make_client(settings))
    except Exception as e:
        logger.warning("Gemini speech failed (%s)", e)
        speech_error = e
        audio, mime_type = b"", ""

    if audio:
        voiceover = to_playable(audio, mime_type)
    elif settings.fallback_voice:
        logger.info("Falling back to edge-tts voice %s", settings.fallback_voice)
        try:
            voiceover = await _edge_speech(script, settings.fallback_voice)
        except Exception as e:
            raise VoiceoverError(f"Fallback speech failed: {e}") from e

    if voiceover is None:
        if speech_error is not None:
            raise VoiceoverError(f"Speech service returned no audio: {speech_error}") from speech_error
        raise VoiceoverError("Speech service returned no audio")

    if output_path is not None:
        await save_voiceover(voiceover, output_path)
    return voiceover
