"""
Where the files of a request are staged
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Union

DOWNLOADS_DIR = "downloads"
VIDEOS_DIR = "videos"
CONTAINER_EXT = "mp4"


@dataclass(frozen=True)
class ArtifactPaths:
    """
    Raw and final artifact paths for one request_id

    raw:   <cache>/downloads/<request_id>.mp4 (as fetched)
    final: <cache>/videos/<request_id>.mp4    (ready to deliver)
    """
    raw: Path
    final: Path

    @classmethod
    def for_request(cls, cache_dir: Union[str, Path], request_id: str) -> "ArtifactPaths":
        cache = Path(cache_dir)
        filename = f"{request_id}.{CONTAINER_EXT}"
        return cls(
            raw=cache / DOWNLOADS_DIR / filename,
            final=cache / VIDEOS_DIR / filename,
        )
