"""Request, attempt-state and result types for the adaptive GIF encoder."""

import os
from dataclasses import dataclass, replace

from ..constants import (
    BYTES_PER_MB,
    DEFAULT_USER_QUALITY,
    ENCODER_QUALITY_WORST,
    FRAME_SETTLE_DELAY_MS,
    MAX_ATTEMPTS,
    QUALITY_STEP,
    SCALE_STEP,
    USER_QUALITY_MAX,
    USER_QUALITY_MIN,
)


@dataclass(frozen=True)
class EncodeRequest:
    """Immutable input for a single encode invocation."""

    source: bytes
    duration_seconds: int
    frames_per_second: int
    target_size_mb: float
    quality_hint: int = DEFAULT_USER_QUALITY

    def __post_init__(self) -> None:
        if self.duration_seconds <= 0:
            raise ValueError("Duration must be a positive number of seconds")
        if self.frames_per_second <= 0:
            raise ValueError("FPS must be positive")
        if self.target_size_mb <= 0:
            raise ValueError("Target size must be positive")
        if not USER_QUALITY_MIN <= self.quality_hint <= USER_QUALITY_MAX:
            raise ValueError(
                f"Quality must be between {USER_QUALITY_MIN} and {USER_QUALITY_MAX}"
            )

    @property
    def target_size_bytes(self) -> float:
        return self.target_size_mb * BYTES_PER_MB

    def with_frames_per_second(self, frames_per_second: int) -> "EncodeRequest":
        return replace(self, frames_per_second=frames_per_second)


@dataclass
class EncodeAttemptState:
    """Loop-local parameters that only ever degrade between attempts."""

    attempt_index: int
    scale_factor: float
    encoder_quality: int

    def degrade(self, scale_step: float, quality_step: int) -> None:
        self.attempt_index += 1
        self.scale_factor *= scale_step
        self.encoder_quality = min(ENCODER_QUALITY_WORST, self.encoder_quality + quality_step)


@dataclass(frozen=True)
class EncodedResult:
    """Final encoded animation handed back to the caller."""

    data: bytes
    media_type: str
    width: int
    height: int
    frames_per_second: int
    encoder_quality: int
    attempts: int
    target_size_mb: float

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        return self.size_bytes / BYTES_PER_MB

    @property
    def within_budget(self) -> bool:
        """False when the last attempt still overshot the target size."""
        return self.size_mb <= self.target_size_mb


@dataclass(frozen=True)
class EncoderTuning:
    """Tunable retry parameters."""

    scale_step: float = SCALE_STEP
    quality_step: int = QUALITY_STEP
    max_attempts: int = MAX_ATTEMPTS
    settle_delay_ms: float = FRAME_SETTLE_DELAY_MS

    def __post_init__(self) -> None:
        if not 0 < self.scale_step <= 1:
            raise ValueError("Scale step must be in (0, 1]")
        if self.quality_step < 0:
            raise ValueError("Quality step must not be negative")
        if self.max_attempts < 1:
            raise ValueError("At least one attempt is required")
        if self.settle_delay_ms < 0:
            raise ValueError("Settle delay must not be negative")

    @classmethod
    def from_env(cls) -> "EncoderTuning":
        """Build tuning from ``NEON_CRUSH_*`` environment variables, falling back to defaults."""
        try:
            return cls(
                scale_step=float(os.getenv("NEON_CRUSH_SCALE_STEP", SCALE_STEP)),
                quality_step=int(os.getenv("NEON_CRUSH_QUALITY_STEP", QUALITY_STEP)),
                max_attempts=int(os.getenv("NEON_CRUSH_MAX_ATTEMPTS", MAX_ATTEMPTS)),
                settle_delay_ms=float(
                    os.getenv("NEON_CRUSH_SETTLE_DELAY_MS", FRAME_SETTLE_DELAY_MS)
                ),
            )
        except ValueError as e:
            raise ValueError(f"Invalid encoder tuning in environment: {e}") from e
