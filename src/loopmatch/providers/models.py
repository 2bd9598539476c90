"""Provider data models with validation."""

import math
from dataclasses import dataclass

PACES = ("slow", "normal")

# MP3 output is requested at 128 kbps: 16 bytes per millisecond
MP3_BYTES_PER_MS = 128_000 / 8 / 1000


def estimate_mp3_duration_ms(audio: bytes) -> int:
    """Estimate playback duration of a constant-bitrate 128 kbps MP3."""
    return round(len(audio) / MP3_BYTES_PER_MS)


# MPEG-1 Layer III, 128 kbps, 44.1 kHz, mono. Zeroed side info and main data
# decode as 1152 samples of silence.
SILENT_MP3_FRAME = b"\xff\xfb\x90\xc4" + bytes(413)
MP3_FRAME_MS = 1152 / 44.1


def mp3_silence(duration_ms: int) -> bytes:
    """Silent MP3 frames covering at least duration_ms."""
    if duration_ms <= 0:
        return b""
    frames = math.ceil(duration_ms / MP3_FRAME_MS)
    return SILENT_MP3_FRAME * frames


@dataclass
class SynthesisResult:
    """Rendered speech returned by a synthesis provider.

    Args:
        audio: Encoded audio bytes (MP3)
        duration_ms: Playback duration in milliseconds
        content_type: MIME type of the audio bytes
    """

    audio: bytes
    duration_ms: int
    content_type: str = "audio/mpeg"

    def __post_init__(self) -> None:
        if not self.audio:
            raise ValueError("audio cannot be empty")
        if self.duration_ms < 0:
            raise ValueError("duration_ms cannot be negative")


@dataclass
class VoiceSettings:
    """Voice generation settings.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        speed: Speaking speed (0.7-1.2)
    """

    stability: float = 0.5
    similarity_boost: float = 0.75
    speed: float = 1.0

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.7 <= self.speed <= 1.2:
            raise ValueError("speed must be between 0.7 and 1.2")

    @classmethod
    def for_pace(cls, pace: str) -> "VoiceSettings":
        """Settings for a pace; slow speech runs at 85% speed."""
        if pace not in PACES:
            raise ValueError(f"pace must be one of {PACES}, got {pace!r}")
        return cls(speed=0.85 if pace == "slow" else 1.0)
