"""
DeliveryService - posts the final video to a channel webhook
"""
import asyncio
import logging
from pathlib import Path
from typing import Mapping, Optional

import aiohttp

from cliprelay.config import ChannelConfig
from cliprelay.errors import ChannelNotFound, DeliveryFailure


def compose_message(message: Optional[str] = None, username: Optional[str] = None) -> str:
    """
    Build the webhook text

    "<username> shared:" on the first line when a username is known, then the
    message on its own line. Both are optional; an empty string means file only.
    """
    lines = []
    if username:
        lines.append(f"{username} shared:")
    if message:
        lines.append(message)
    return "\n".join(lines)


class DeliveryService:
    """
    Multipart webhook poster

    An unknown channel is an error for the request. A post that fails at the
    network or endpoint level is logged and reported as False, because the
    video has already been produced by then.
    """

    def __init__(self, channels: Mapping[str, ChannelConfig], timeout: float = 300.0, logger: Optional[logging.Logger] = None):
        """
        Args:
            channels: Channel table, name -> ChannelConfig
            timeout: Total seconds allowed for one post
            logger: Logger to report to (module logger by default)
        """
        self.channels = channels
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, channel_name: str) -> ChannelConfig:
        channel = self.channels.get(channel_name)
        if channel is None:
            raise ChannelNotFound(channel_name)
        return channel

    async def send(
        self,
        video_path: Path,
        channel_name: str,
        message: Optional[str] = None,
        username: Optional[str] = None,
        log: Optional[logging.LoggerAdapter] = None
    ) -> bool:
        """
        Post the video and text to the channel

        Args:
            video_path: Final artifact
            channel_name: Name looked up in the channel table
            message: Free text from the request
            username: Display name of the requester
            log: Per-request logger, if the caller has one

        Returns:
            True on a 2xx response, False if the post failed

        Raises:
            ChannelNotFound: channel_name is not configured
        """
        log = log or self.logger
        channel = self.resolve(channel_name)
        content = compose_message(message, username)

        try:
            status = await self._post(channel, video_path, content)
        except DeliveryFailure as e:
            log.error(f"[delivery] DeliveryFailure: {e}")
            return False

        log.info(f"[delivery] Message sent to '{channel.name}': {status}")
        return True

    async def _post(self, channel: ChannelConfig, video_path: Path, content: str) -> int:
        video = await asyncio.to_thread(open, video_path, "rb")
        try:
            form = aiohttp.FormData()
            form.add_field("content", content)
            form.add_field("file", video, filename=video_path.name, content_type="video/mp4")

            try:
                async with aiohttp.ClientSession(timeout=self.timeout) as session:
                    async with session.post(channel.endpoint, data=form) as response:
                        if 200 <= response.status < 300:
                            return response.status
                        # error pages are not always valid utf-8
                        body = (await response.read()).decode("utf-8", errors="replace")
                        raise DeliveryFailure(
                            f"Error sending webhook to '{channel.name}': HTTP {response.status} {body[:500]}",
                            status=response.status,
                        )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise DeliveryFailure(f"Error sending webhook to '{channel.name}': {e!r}") from e
        finally:
            await asyncio.to_thread(video.close)
