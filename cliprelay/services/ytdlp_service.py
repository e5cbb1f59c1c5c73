"""
YtDlpService - low-level calls to the yt-dlp executable
"""
import logging
from pathlib import Path

from cliprelay.errors import ProcessFailure
from cliprelay.services.process_runner import ProcessRunner
from cliprelay.utils.utils import parse_duration

logger = logging.getLogger(__name__)


def _first_line(output: str) -> str:
    for line in output.splitlines():
        if line.strip():
            return line.strip()
    return ""


class YtDlpService:
    """
    Thin adapter over the yt-dlp CLI

    Knows the command lines only; knows nothing about requests, channels or cleanup.
    """

    def __init__(self, runner: ProcessRunner, binary: str = "yt-dlp"):
        self.runner = runner
        self.binary = binary

    async def get_duration(self, url: str) -> int:
        """
        Ask yt-dlp for the duration without downloading

        Returns:
            Duration in whole seconds

        Raises:
            ProcessFailure: yt-dlp failed or printed something that is not a duration
        """
        output = await self.runner.run(self.binary, ["--get-duration", url])
        duration = _first_line(output)
        try:
            seconds = parse_duration(duration)
        except ValueError as e:
            raise ProcessFailure(
                f"{self.binary} returned an unreadable duration: {e}",
                executable=self.binary,
            ) from e
        logger.info(f"[yt-dlp] Video length is: {duration} ({seconds}s)")
        return seconds

    async def get_title(self, url: str) -> str:
        output = await self.runner.run(self.binary, ["--get-title", url])
        return _first_line(output)

    async def download(self, url: str, output_path: Path) -> None:
        """
        Download and recode the video into an mp4 container at output_path
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        await self.runner.run(
            self.binary,
            ["-o", str(output_path), "--recode-video", "mp4", url],
        )
