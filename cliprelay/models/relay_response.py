"""
RelayResponse - outcome of one pipeline run
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class RelayResponse:
    """
    Result returned by RelayVideoUseCase

    Attributes:
        status:
            - DELIVERED: file produced and posted to the channel
            - PRODUCED: file produced, the webhook post failed
            - REJECTED: domain not allowed or video too long
            - FAILED: any other error (tool failure, infeasible size, unknown channel)
        request_id: Request the response belongs to
        title: Video title, when it was fetched
        final_path: Where the final artifact was written, for logging only;
            the file itself is swept before the response is returned
        error: Error kind and message (if status is REJECTED or FAILED)
        user_message: Text safe to show to the requester
    """
    status: str  # DELIVERED | PRODUCED | REJECTED | FAILED
    request_id: str
    title: Optional[str] = None
    final_path: Optional[Path] = None
    error: Optional[str] = None
    user_message: Optional[str] = None

    def is_delivered(self) -> bool:
        return self.status == 'DELIVERED'

    def is_produced(self) -> bool:
        """File produced, whether or not the post went through"""
        return self.status in ('DELIVERED', 'PRODUCED')

    def is_rejected(self) -> bool:
        return self.status == 'REJECTED'

    def is_error(self) -> bool:
        return self.status in ('REJECTED', 'FAILED')
