"""
Settings loaded once from the environment (.env) at process start
"""
import os
import shutil
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class ChannelConfig:
    """A named delivery destination"""
    name: str
    endpoint: str


@dataclass(frozen=True)
class Settings:
    """
    Immutable process configuration

    Built once by load_settings() and passed by reference into the pipeline
    and the web app.
    """
    port: int = 3000
    host: str = "0.0.0.0"
    max_file_size_mb: float = 10.0
    size_safety_margin: float = 0.9
    max_video_length: int = 600
    server_name: str = "cliprelay"
    default_channel: str = "default"
    channels: Mapping[str, ChannelConfig] = field(default_factory=lambda: MappingProxyType({}))
    cache_dir: str = "cache"
    log_file: str = "logs/cliprelay.log"
    log_level: str = "INFO"
    process_timeout: Optional[float] = 900.0
    delivery_timeout: float = 300.0
    ytdlp_binary: str = "yt-dlp"
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"

    @property
    def safe_file_size_mb(self) -> float:
        return self.max_file_size_mb * self.size_safety_margin


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")


def _binary(env: Mapping[str, str], name: str, exe: str) -> str:
    # env var -> PATH -> bare name
    override = env.get(name, "").strip()
    if override:
        return override
    return shutil.which(exe) or exe


def parse_channels(raw: str) -> dict:
    """
    Parse the CHANNELS variable

    Format: name=endpoint pairs separated by commas or newlines.
    Only the first '=' separates the name, so endpoints may carry query strings.

    Args:
        raw: Value of the variable

    Returns:
        dict name -> ChannelConfig
    """
    channels = {}
    for chunk in raw.replace("\n", ",").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, sep, endpoint = chunk.partition("=")
        name, endpoint = name.strip(), endpoint.strip()
        if not sep or not name or not endpoint:
            raise ValueError(f"CHANNELS entry must look like name=endpoint, got '{chunk}'")
        channels[name] = ChannelConfig(name=name, endpoint=endpoint)
    return channels


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment

    Args:
        env: Mapping to read from; defaults to os.environ after loading .env

    Returns:
        Settings
    """
    if env is None:
        load_dotenv()
        env = os.environ

    default_channel = env.get("DEFAULT_CHANNEL", "").strip() or "default"
    channels = parse_channels(env.get("CHANNELS", ""))

    # single-channel deployments: DISCORD_WEBHOOK becomes the default channel
    webhook = env.get("DISCORD_WEBHOOK", "").strip()
    if webhook and default_channel not in channels:
        channels[default_channel] = ChannelConfig(name=default_channel, endpoint=webhook)

    max_file_size = _get_float(env, "MAX_FILE_SIZE", 10.0)
    if max_file_size <= 0:
        raise ValueError("MAX_FILE_SIZE must be positive")
    margin = _get_float(env, "SIZE_SAFETY_MARGIN", 0.9)
    if not 0 < margin <= 1:
        raise ValueError("SIZE_SAFETY_MARGIN must be in (0, 1]")

    process_timeout = _get_float(env, "PROCESS_TIMEOUT", 900.0)

    return Settings(
        port=_get_int(env, "PORT", 3000),
        host=env.get("HOST", "").strip() or "0.0.0.0",
        max_file_size_mb=max_file_size,
        size_safety_margin=margin,
        max_video_length=_get_int(env, "MAX_VIDEO_LENGTH", 600),
        server_name=env.get("SERVER_NAME", "").strip() or "cliprelay",
        default_channel=default_channel,
        channels=MappingProxyType(channels),
        cache_dir=env.get("CACHE_DIR", "").strip() or "cache",
        log_file=env.get("LOG_FILE", "").strip() or "logs/cliprelay.log",
        log_level=env.get("LOG_LEVEL", "").strip().upper() or "INFO",
        process_timeout=process_timeout if process_timeout > 0 else None,
        delivery_timeout=_get_float(env, "DELIVERY_TIMEOUT", 300.0),
        ytdlp_binary=_binary(env, "YTDLP_BINARY", "yt-dlp"),
        ffmpeg_binary=_binary(env, "FFMPEG_BINARY", "ffmpeg"),
        ffprobe_binary=_binary(env, "FFPROBE_BINARY", "ffprobe"),
    )
