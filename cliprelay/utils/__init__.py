"""
URL, request path, duration and logging helpers
"""
from .utils import (
    SUPPORTED_DOMAINS,
    ParsedRequest,
    normalize_url,
    is_approved_url,
    parse_request_path,
    parse_duration
)
from .log import setup_logging, RequestLogAdapter

__all__ = [
    'SUPPORTED_DOMAINS',
    'ParsedRequest',
    'normalize_url',
    'is_approved_url',
    'parse_request_path',
    'parse_duration',
    'setup_logging',
    'RequestLogAdapter'
]
