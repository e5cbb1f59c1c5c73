"""
Services wrapping external tools, webhook delivery and cleanup
"""
from .process_runner import ProcessRunner
from .ytdlp_service import YtDlpService
from .ffmpeg_service import FFmpegService
from .delivery_service import DeliveryService, compose_message
from .cleanup_service import CleanupService

__all__ = ['ProcessRunner', 'YtDlpService', 'FFmpegService', 'DeliveryService', 'compose_message', 'CleanupService']
