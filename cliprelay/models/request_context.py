"""
RequestContext - everything the pipeline knows about one inbound request
"""
import uuid
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """
    One relay request

    Created when the request arrives and discarded after cleanup.
    request_id is the only key tying together the files staged for the request.

    Attributes:
        source_url: Embedded media URL, as received
        message: Free text to post along with the video
        username: Display name of the requester (from the cookie)
        channel: Name of the delivery channel
        client_address: Requester address, used only to tag log records
        request_id: Unique token, prefix of every staged file
    """
    source_url: str
    message: str = ""
    username: Optional[str] = None
    channel: str = "default"
    client_address: Optional[str] = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
