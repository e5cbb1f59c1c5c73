"""
Error kinds raised by the relay pipeline
"""
from typing import Optional


class PipelineError(Exception):
    """
    Base class for every error that aborts a relay request

    Attributes:
        user_message: Short text safe to show to the requester
    """
    user_message = "Something went wrong while processing the video."

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message


class InvalidDomain(PipelineError):
    user_message = "URL below is not an approved URL."

    def __init__(self, url: str):
        super().__init__(f"URL '{url}' is not an approved URL")
        self.url = url


class DurationExceeded(PipelineError):
    def __init__(self, duration: int, limit: int):
        super().__init__(
            f"Video is {duration} seconds long, limit is {limit}",
            user_message=f"Video is longer than {limit} seconds",
        )
        self.duration = duration
        self.limit = limit


class ProcessFailure(PipelineError):
    """
    An external tool could not be launched or exited with an error

    returncode is None when the process never started (or was killed on timeout).
    """

    def __init__(self, message: str, executable: str = "", returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.executable = executable
        self.returncode = returncode
        self.stderr = stderr


class SizeConstraintInfeasible(PipelineError):
    pass


class ChannelNotFound(PipelineError):
    def __init__(self, channel: str):
        super().__init__(f"Channel '{channel}' is not configured")
        self.channel = channel


class DeliveryFailure(PipelineError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
