"""Hook generation pipeline modules."""
from .wav_header import (
    AudioEncoding,
    WavSynthesisError,
    InvalidEncodingDescriptor,
    MissingSampleRate,
    MissingBitsPerSample,
    MalformedParameter,
    MalformedPayload,
    PayloadTooLarge,
    parse_descriptor,
    build_header,
    read_header,
    pcm_to_wav,
    assemble,
    audio_extension,
)
from .hook_writer import generate_hook_script, HookGenerationError
from .voiceover import generate_voiceover, Voiceover, VoiceoverError
from .composition import render_composition, write_composition
from .frame_capture import capture_frames, frame_timestamps, FrameCaptureError
from .encoder import encode_video, cleanup_frames, EncodingError

__all__ = [
    "AudioEncoding",
    "WavSynthesisError",
    "InvalidEncodingDescriptor",
    "MissingSampleRate",
    "MissingBitsPerSample",
    "MalformedParameter",
    "MalformedPayload",
    "PayloadTooLarge",
    "parse_descriptor",
    "build_header",
    "read_header",
    "pcm_to_wav",
    "assemble",
    "audio_extension",
    "generate_hook_script",
    "HookGenerationError",
    "generate_voiceover",
    "Voiceover",
    "VoiceoverError",
    "render_composition",
    "write_composition",
    "capture_frames",
    "frame_timestamps",
    "FrameCaptureError",
    "encode_video",
    "cleanup_frames",
    "EncodingError",
]
