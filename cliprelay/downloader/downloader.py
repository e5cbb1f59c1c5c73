"""
VideoDownloader - duration gate and staged download through yt-dlp
"""
import asyncio
import logging
from pathlib import Path

from cliprelay.errors import DurationExceeded, ProcessFailure
from cliprelay.models.artifact_paths import ArtifactPaths
from cliprelay.services.ytdlp_service import YtDlpService

logger = logging.getLogger(__name__)


class VideoDownloader:
    def __init__(self, ytdlp: YtDlpService, cache_dir: str = "cache", max_video_length: int = 600):
        """
        Args:
            ytdlp: yt-dlp adapter
            cache_dir: Root of the staging tree
            max_video_length: Longest accepted video, in seconds
        """
        self.ytdlp = ytdlp
        self.cache_dir = cache_dir
        self.max_video_length = max_video_length

    def paths_for(self, request_id: str) -> ArtifactPaths:
        return ArtifactPaths.for_request(self.cache_dir, request_id)

    async def check_duration(self, url: str) -> int:
        """
        Reject videos longer than max_video_length before anything is transferred

        Returns:
            Duration in seconds

        Raises:
            DurationExceeded: the video is too long
            ProcessFailure: yt-dlp could not tell the duration
        """
        seconds = await self.ytdlp.get_duration(url)
        if seconds > self.max_video_length:
            raise DurationExceeded(seconds, self.max_video_length)
        return seconds

    async def get_title(self, url: str) -> str:
        return await self.ytdlp.get_title(url)

    async def download(self, url: str, request_id: str) -> Path:
        """
        Fetch the video into <cache>/downloads/<request_id>.mp4

        Returns:
            Path of the raw artifact

        Raises:
            ProcessFailure: yt-dlp failed, or exited cleanly without producing the file
        """
        raw = self.paths_for(request_id).raw
        logger.info(f"[downloader] Attempting to download: {url}")
        await self.ytdlp.download(url, raw)

        if not await asyncio.to_thread(raw.is_file):
            raise ProcessFailure(
                f"yt-dlp succeeded but could not locate output file {raw}",
                executable=self.ytdlp.binary,
            )
        logger.info(f"[downloader] Video downloaded as: {raw.name}")
        return raw
