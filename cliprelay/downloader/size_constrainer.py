"""
SizeConstrainer - makes the downloaded video fit the upload limit
"""
import asyncio
import errno
import logging
import os
import shutil
import uuid
from pathlib import Path

from cliprelay.models.bitrate_plan import plan_bitrate
from cliprelay.services.ffmpeg_service import FFmpegService

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


def move_file(src: Path, dest: Path) -> None:
    """
    Move src to dest, atomically when both are on the same filesystem
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.replace(src, dest)
        return
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    # cross-device: copy next to dest, then replace
    tmp = dest.with_name(dest.name + f".tmp-{uuid.uuid4().hex}")
    shutil.copy2(src, tmp)
    os.replace(tmp, dest)
    src.unlink(missing_ok=True)


class SizeConstrainer:
    """
    Either relocates the raw file as-is or re-encodes it under the safe budget

    The safe budget is max_file_size_mb scaled by safety_margin, to leave room
    for container overhead. When re-encoding, the raw file stays where it is
    and is removed later by the sweeper.
    """

    def __init__(self, ffmpeg: FFmpegService, max_file_size_mb: float = 10.0, safety_margin: float = 0.9):
        self.ffmpeg = ffmpeg
        self.max_file_size_mb = max_file_size_mb
        self.safety_margin = safety_margin

    @property
    def safe_file_size_mb(self) -> float:
        return self.max_file_size_mb * self.safety_margin

    async def constrain(self, raw: Path, final: Path) -> Path:
        """
        Produce the final artifact from the raw one

        Args:
            raw: Downloaded file
            final: Where the deliverable should end up

        Returns:
            final

        Raises:
            SizeConstraintInfeasible: the budget cannot hold this duration
            ProcessFailure: ffprobe or ffmpeg failed
            OSError: the relocation failed
        """
        size = (await asyncio.to_thread(os.path.getsize, raw)) / BYTES_PER_MB
        logger.info(f"[size] {raw.name}: {size:.2f}MB (safe budget {self.safe_file_size_mb:.2f}MB)")

        if size <= self.safe_file_size_mb:
            await asyncio.to_thread(move_file, raw, final)
            logger.info("[size] Moved video to videos folder, ready to send")
            return final

        logger.info(f"[size] Video is greater than {self.max_file_size_mb}MB, resizing...")
        duration = await self.ffmpeg.probe_duration(raw)
        plan = plan_bitrate(self.safe_file_size_mb, duration)
        return await self.ffmpeg.encode(raw, final, plan)
