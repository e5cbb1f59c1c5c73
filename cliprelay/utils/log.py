"""
Logging setup: console plus a flat event log file
"""
import logging
import os
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_file: Optional[str] = None, level: str = "INFO") -> None:
    """
    Configure the root logger once at process start

    Args:
        log_file: Path of the flat log file, or None for console only
        level: Logging level name
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


class RequestLogAdapter(logging.LoggerAdapter):
    """
    Prefix records with the request id and, when known, the requester address

    [3f2a...] [203.0.113.7] Video downloaded
    """

    def process(self, msg, kwargs):
        request_id = self.extra.get("request_id")
        client = self.extra.get("client")
        prefix = f"[{request_id}] " if request_id else ""
        if client:
            prefix += f"[{client}] "
        return f"{prefix}{msg}", kwargs
