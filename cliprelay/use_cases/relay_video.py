"""
Use case: download a linked video, fit it under the size limit, post it to a channel
"""
import logging
from typing import Optional

from cliprelay.config import Settings
from cliprelay.downloader.downloader import VideoDownloader
from cliprelay.downloader.size_constrainer import SizeConstrainer
from cliprelay.errors import InvalidDomain, DurationExceeded, PipelineError
from cliprelay.models.relay_response import RelayResponse
from cliprelay.models.request_context import RequestContext
from cliprelay.services.cleanup_service import CleanupService
from cliprelay.services.delivery_service import DeliveryService
from cliprelay.services.ffmpeg_service import FFmpegService
from cliprelay.services.process_runner import ProcessRunner
from cliprelay.services.ytdlp_service import YtDlpService
from cliprelay.utils.log import RequestLogAdapter
from cliprelay.utils.utils import SUPPORTED_DOMAINS, is_approved_url

logger = logging.getLogger(__name__)


class RelayVideoUseCase:
    """
    The download -> constrain -> deliver pipeline

    Stages run strictly one after another for a request:
        validate -> duration gate -> title -> download -> constrain -> deliver -> cleanup

    admit() covers the cheap checks done while the requester waits, execute()
    the heavy part. Whatever happens, the files of the request are swept.
    """

    def __init__(
        self,
        downloader: VideoDownloader,
        constrainer: SizeConstrainer,
        delivery: DeliveryService,
        cleanup: CleanupService,
        approved_domains=SUPPORTED_DOMAINS,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            downloader: Duration gate and yt-dlp download
            constrainer: Size check / re-encode
            delivery: Webhook poster
            cleanup: Sweeper for staged files
            approved_domains: Host allow-list
            logger: Logger to report to (module logger by default)
        """
        self.downloader = downloader
        self.constrainer = constrainer
        self.delivery = delivery
        self.cleanup = cleanup
        self.approved_domains = approved_domains
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: Settings, runner: Optional[ProcessRunner] = None) -> "RelayVideoUseCase":
        """Wire the production pipeline from the process settings"""
        runner = runner or ProcessRunner(timeout=settings.process_timeout)
        ytdlp = YtDlpService(runner, binary=settings.ytdlp_binary)
        ffmpeg = FFmpegService(runner, ffmpeg=settings.ffmpeg_binary, ffprobe=settings.ffprobe_binary)
        return cls(
            downloader=VideoDownloader(ytdlp, cache_dir=settings.cache_dir, max_video_length=settings.max_video_length),
            constrainer=SizeConstrainer(ffmpeg, settings.max_file_size_mb, settings.size_safety_margin),
            delivery=DeliveryService(settings.channels, timeout=settings.delivery_timeout),
            cleanup=CleanupService(settings.cache_dir),
        )

    def _log(self, ctx: RequestContext) -> RequestLogAdapter:
        return RequestLogAdapter(self.logger, {"request_id": ctx.request_id, "client": ctx.client_address})

    async def admit(self, ctx: RequestContext) -> str:
        """
        Checks done before the heavy work starts

        Args:
            ctx: The request

        Returns:
            Video title (may be empty)

        Raises:
            InvalidDomain: host not allow-listed
            DurationExceeded: video is too long
            ProcessFailure: yt-dlp could not inspect the video
        """
        log = self._log(ctx)
        if not is_approved_url(ctx.source_url, self.approved_domains):
            log.warning(f"[pipeline] URL '{ctx.source_url}' is not an approved URL")
            raise InvalidDomain(ctx.source_url)

        try:
            await self.downloader.check_duration(ctx.source_url)
            title = await self.downloader.get_title(ctx.source_url)
        except PipelineError as e:
            log.error(f"[pipeline] {type(e).__name__}: {e}")
            await self.sweep(ctx)
            raise
        return title

    async def execute(self, ctx: RequestContext, title: Optional[str] = None) -> RelayResponse:
        """
        Download, constrain and deliver; never raises

        Args:
            ctx: An admitted request
            title: Title found by admit(), carried into the response

        Returns:
            RelayResponse with status DELIVERED, PRODUCED or FAILED
        """
        log = self._log(ctx)
        final = None
        try:
            raw = await self.downloader.download(ctx.source_url, ctx.request_id)
            final = await self.constrainer.constrain(raw, self.downloader.paths_for(ctx.request_id).final)
            delivered = await self.delivery.send(final, ctx.channel, ctx.message, ctx.username, log=log)
            status = 'DELIVERED' if delivered else 'PRODUCED'
            log.info(f"[pipeline] Done: {status}")
            return RelayResponse(status=status, request_id=ctx.request_id, title=title, final_path=final)
        except PipelineError as e:
            log.error(f"[pipeline] Failed to relay {ctx.source_url}: {type(e).__name__}: {e}")
            return RelayResponse(
                status='FAILED',
                request_id=ctx.request_id,
                title=title,
                final_path=final,
                error=f"{type(e).__name__}: {e}",
                user_message=e.user_message,
            )
        except Exception as e:
            log.error(f"[pipeline] Unexpected error while relaying {ctx.source_url}: {e}", exc_info=True)
            return RelayResponse(
                status='FAILED',
                request_id=ctx.request_id,
                title=title,
                final_path=final,
                error=f"{type(e).__name__}: {e}",
                user_message=PipelineError.user_message,
            )
        finally:
            await self.sweep(ctx)

    async def run(self, ctx: RequestContext) -> RelayResponse:
        """admit() then execute(), with admission errors turned into a response"""
        try:
            title = await self.admit(ctx)
        except (InvalidDomain, DurationExceeded) as e:
            return RelayResponse(
                status='REJECTED',
                request_id=ctx.request_id,
                error=f"{type(e).__name__}: {e}",
                user_message=e.user_message,
            )
        except PipelineError as e:
            return RelayResponse(
                status='FAILED',
                request_id=ctx.request_id,
                error=f"{type(e).__name__}: {e}",
                user_message=e.user_message,
            )
        return await self.execute(ctx, title=title)

    async def sweep(self, ctx: RequestContext) -> int:
        """Remove every staged file of the request; errors are only logged"""
        log = self._log(ctx)
        try:
            return await self.cleanup.sweep(ctx.request_id, log=log)
        except Exception as e:
            log.error(f"[pipeline] Cleanup failed: {e}", exc_info=True)
            return 0
