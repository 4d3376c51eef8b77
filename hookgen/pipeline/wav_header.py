"""WAV container synthesis for headerless PCM returned by speech models."""
import base64
import binascii
import mimetypes
import re
import struct
from dataclasses import dataclass
from typing import List, Optional, Tuple

# http://soundfile.sapp.org/doc/WaveFormat
HEADER_SIZE = 44
MAX_CHUNK_SIZE = 0xFFFFFFFF
MAX_SHORT_FIELD = 0xFFFF

# ChunkID, ChunkSize, Format, Subchunk1ID, Subchunk1Size, AudioFormat,
# NumChannels, SampleRate, ByteRate, BlockAlign, BitsPerSample,
# Subchunk2ID, Subchunk2Size
_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")

_PCM_SUBTYPE = re.compile(r"L(\d+)")

# Preferred extensions for the containers speech services actually return.
_KNOWN_EXTENSIONS = {
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/ogg": "ogg",
    "audio/opus": "opus",
    "audio/aac": "aac",
    "audio/flac": "flac",
    "audio/webm": "webm",
}

_MIME_TYPES = mimetypes.MimeTypes()


class WavSynthesisError(ValueError):
    """Base class for failures while turning raw audio into a WAV stream."""

    kind = "WavSynthesisError"


class InvalidEncodingDescriptor(WavSynthesisError):
    """The MIME type does not describe a usable PCM encoding.

    ``errors`` lists every underlying problem, so a descriptor missing both
    the bit depth and the sample rate reports both.
    """

    kind = "InvalidEncodingDescriptor"

    def __init__(self, message: str, errors: Optional[List["InvalidEncodingDescriptor"]] = None):
        super().__init__(message)
        self.errors = errors if errors is not None else [self]


class MissingSampleRate(InvalidEncodingDescriptor):
    kind = "MissingSampleRate"


class MissingBitsPerSample(InvalidEncodingDescriptor):
    kind = "MissingBitsPerSample"


class MalformedParameter(InvalidEncodingDescriptor):
    kind = "MalformedParameter"


class PayloadTooLarge(WavSynthesisError):
    kind = "PayloadTooLarge"


class MalformedPayload(WavSynthesisError):
    kind = "MalformedPayload"


@dataclass(frozen=True)
class AudioEncoding:
    """PCM encoding parameters parsed from a MIME type like ``audio/L16;rate=24000``."""

    sample_rate: Optional[int] = None
    bits_per_sample: Optional[int] = None
    num_channels: int = 1

    def problems(self, mime_type: str = "") -> List[InvalidEncodingDescriptor]:
        found: List[InvalidEncodingDescriptor] = []
        where = f" in {mime_type!r}" if mime_type else ""
        if self.bits_per_sample is None:
            found.append(MissingBitsPerSample(
                f"No bit depth{where}: subtype must look like L<N> (e.g. L16)"
            ))
        if self.sample_rate is None:
            found.append(MissingSampleRate(f"No 'rate=' parameter{where}"))
        return found

    def require_complete(self, mime_type: str = "") -> "AudioEncoding":
        """Return self, or raise if the header fields cannot be computed."""
        found = self.problems(mime_type)
        if len(found) == 1:
            raise found[0]
        if found:
            raise InvalidEncodingDescriptor(
                "; ".join(str(e) for e in found), errors=found
            )

        if self.sample_rate <= 0 or self.bits_per_sample <= 0 or self.num_channels <= 0:
            raise InvalidEncodingDescriptor(
                f"Encoding fields must be positive, got {self}"
            )
        if self.bits_per_sample % 8:
            raise InvalidEncodingDescriptor(
                f"{self.bits_per_sample}-bit samples do not fill whole bytes"
            )
        for name, value, limit in (
            ("num_channels", self.num_channels, MAX_SHORT_FIELD),
            ("bits_per_sample", self.bits_per_sample, MAX_SHORT_FIELD),
            ("block_align", self.block_align, MAX_SHORT_FIELD),
            ("sample_rate", self.sample_rate, MAX_CHUNK_SIZE),
            ("byte_rate", self.byte_rate, MAX_CHUNK_SIZE),
        ):
            if value > limit:
                raise InvalidEncodingDescriptor(
                    f"{name} {value} does not fit in its header field (max {limit})"
                )
        return self

    @property
    def block_align(self) -> int:
        return self.num_channels * self.bits_per_sample // 8

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align


def parse_descriptor(mime_type: str) -> AudioEncoding:
    """
    Parse PCM encoding parameters out of a MIME type.

    ``audio/L16;rate=24000`` -> 16 bits, 24000 Hz, mono. Fields the MIME
    type does not convey stay None; call ``require_complete()`` (or let
    ``build_header`` do it) before trusting them.

    Raises:
        MalformedParameter: a parameter has no ``=`` or ``rate`` is not an integer
    """
    tokens = [token.strip() for token in mime_type.split(";")]
    primary, params = tokens[0], tokens[1:]

    bits_per_sample = None
    _, _, subtype = primary.partition("/")
    match = _PCM_SUBTYPE.match(subtype.strip())
    if match:
        bits_per_sample = int(match.group(1))

    sample_rate = None
    for param in params:
        if not param:
            continue
        if "=" not in param:
            raise MalformedParameter(f"Parameter {param!r} in {mime_type!r} has no '='")
        key, value = (part.strip() for part in param.split("=", 1))
        if key != "rate":
            continue
        if not value.isdecimal():
            raise MalformedParameter(f"Sample rate {value!r} in {mime_type!r} is not an integer")
        sample_rate = int(value)

    return AudioEncoding(sample_rate=sample_rate, bits_per_sample=bits_per_sample)


def build_header(data_length: int, encoding: AudioEncoding) -> bytes:
    """Build the canonical 44-byte RIFF/WAVE header for ``data_length`` bytes of PCM."""
    encoding.require_complete()
    if data_length < 0:
        raise ValueError(f"data_length must be non-negative, got {data_length}")
    if 36 + data_length > MAX_CHUNK_SIZE:
        raise PayloadTooLarge(
            f"{data_length} bytes of audio do not fit in a 32-bit RIFF chunk size"
        )

    return _HEADER_STRUCT.pack(
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        16,  # PCM fmt chunk size
        1,  # AudioFormat: PCM
        encoding.num_channels,
        encoding.sample_rate,
        encoding.byte_rate,
        encoding.block_align,
        encoding.bits_per_sample,
        b"data",
        data_length,
    )


def read_header(data: bytes) -> Tuple[AudioEncoding, int]:
    """Decode a canonical header back into its encoding and data length."""
    if len(data) < HEADER_SIZE:
        raise InvalidEncodingDescriptor(f"Need {HEADER_SIZE} header bytes, got {len(data)}")

    (riff, _, wave, fmt, fmt_size, audio_format, channels, rate,
     _, _, bits, data_id, data_length) = _HEADER_STRUCT.unpack_from(data)

    if (riff, wave, fmt, data_id) != (b"RIFF", b"WAVE", b"fmt ", b"data"):
        raise InvalidEncodingDescriptor("Not a canonical RIFF/WAVE header")
    if fmt_size != 16 or audio_format != 1:
        raise InvalidEncodingDescriptor("Only uncompressed PCM headers are supported")

    encoding = AudioEncoding(sample_rate=rate, bits_per_sample=bits, num_channels=channels)
    return encoding, data_length


def pcm_to_wav(pcm: bytes, mime_type: str) -> bytes:
    """Prepend a WAV header describing ``mime_type`` to raw PCM bytes."""
    encoding = parse_descriptor(mime_type).require_complete(mime_type)
    return build_header(len(pcm), encoding) + pcm


def assemble(raw_base64_audio: str, mime_type: str) -> bytes:
    """
    Decode base64 PCM and wrap it in a WAV container.

    The data length written to the header is the decoded byte count, so
    the header always matches the payload that follows it.
    """
    try:
        pcm = base64.b64decode(raw_base64_audio, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedPayload(f"Audio payload is not valid base64: {e}") from e
    return pcm_to_wav(pcm, mime_type)


def audio_extension(mime_type: str) -> Optional[str]:
    """
    File extension for a container MIME type, or None for headerless audio.

    Parameters are ignored, so ``audio/mpeg;bitrate=128`` still maps to
    ``mp3`` while ``audio/L16;rate=24000`` maps to None.
    """
    base = mime_type.split(";", 1)[0].strip().lower()
    if not base:
        return None
    if base in _KNOWN_EXTENSIONS:
        return _KNOWN_EXTENSIONS[base]
    if _PCM_SUBTYPE.match(base.partition("/")[2].upper()):
        return None
    ext = _MIME_TYPES.guess_extension(base)
    return ext.lstrip(".") if ext else None
