"""
FFmpegService - ffprobe duration lookup and bitrate-constrained re-encode
"""
import logging
from pathlib import Path

from cliprelay.models.bitrate_plan import BitratePlan
from cliprelay.services.process_runner import ProcessRunner

logger = logging.getLogger(__name__)

VIDEO_CODEC = "libx264"
AUDIO_CODEC = "aac"


class FFmpegService:
    def __init__(self, runner: ProcessRunner, ffmpeg: str = "ffmpeg", ffprobe: str = "ffprobe"):
        self.runner = runner
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe

    async def probe_duration(self, video_path: Path) -> float:
        """
        Read the container duration with ffprobe

        Returns:
            Duration in seconds, or 0.0 if ffprobe printed nothing usable
        """
        output = await self.runner.run(self.ffprobe, [
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(video_path),
        ])
        try:
            return float(output.strip())
        except ValueError:
            logger.warning(f"[ffprobe] Unreadable duration for {video_path}: {output.strip()!r}")
            return 0.0

    async def encode(self, input_path: Path, output_path: Path, plan: BitratePlan) -> Path:
        """
        Re-encode input_path at the bitrates of the plan, overwriting output_path
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(
            f"[ffmpeg] Re-encoding {input_path.name}: duration {plan.duration_seconds}s, "
            f"target video bitrate {plan.video_bitrate // 1000} kbps"
        )
        await self.runner.run(self.ffmpeg, [
            "-i", str(input_path),
            "-c:v", VIDEO_CODEC,
            "-b:v", str(plan.video_bitrate),
            "-c:a", AUDIO_CODEC,
            "-b:a", str(plan.audio_bitrate),
            str(output_path),
            "-y",
        ])
        return output_path
