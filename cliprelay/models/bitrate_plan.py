"""
BitratePlan - target bitrates for squeezing a video under a size budget
"""
import math
from dataclasses import dataclass

from cliprelay.errors import SizeConstraintInfeasible

BITS_PER_MB = 8_000_000
AUDIO_BITRATE = 64_000  # 64 kbps


@dataclass(frozen=True)
class BitratePlan:
    """
    Bitrates (bits per second) for a single re-encode pass

    Computed fresh for each oversized file and never stored.

    Attributes:
        target_byte_budget_mb: Safe size budget in MB
        duration_seconds: Media duration reported by ffprobe
        target_bits: Budget expressed in bits
        total_bitrate: floor(target_bits / duration)
        audio_bitrate: Fixed audio bitrate
        video_bitrate: total_bitrate - audio_bitrate
    """
    target_byte_budget_mb: float
    duration_seconds: float
    target_bits: int
    total_bitrate: int
    audio_bitrate: int
    video_bitrate: int


def plan_bitrate(safe_budget_mb: float, duration_seconds: float, audio_bitrate: int = AUDIO_BITRATE) -> BitratePlan:
    """
    Derive the bitrates that fit the media into safe_budget_mb

    Integer math with truncating division, so rounding always errs below budget.

    Raises:
        SizeConstraintInfeasible: duration is not positive, or nothing is left
            for video once audio is accounted for
    """
    if not duration_seconds or duration_seconds <= 0 or math.isnan(duration_seconds):
        raise SizeConstraintInfeasible(f"Could not get video duration (got {duration_seconds})")

    target_bits = int(safe_budget_mb * BITS_PER_MB)
    total_bitrate = math.floor(target_bits / duration_seconds)
    video_bitrate = total_bitrate - audio_bitrate

    if video_bitrate <= 0:
        raise SizeConstraintInfeasible(
            f"Target size {safe_budget_mb:.2f}MB too small for {duration_seconds:.1f}s of video"
        )

    return BitratePlan(
        target_byte_budget_mb=safe_budget_mb,
        duration_seconds=duration_seconds,
        target_bits=target_bits,
        total_bitrate=total_bitrate,
        audio_bitrate=audio_bitrate,
        video_bitrate=video_bitrate,
    )
