"""
ProcessRunner - runs external tools (yt-dlp, ffprobe, ffmpeg) without a shell
"""
import asyncio
import logging
from typing import Optional, Sequence

from cliprelay.errors import ProcessFailure

logger = logging.getLogger(__name__)

# How much of stderr goes into the error message
STDERR_TAIL = 2000


class ProcessRunner:
    """
    Async wrapper around asyncio.create_subprocess_exec

    Arguments are passed as an argv list, so URLs and paths are never
    interpreted by a shell. The caller awaits until the process has exited.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds a single invocation may run; None waits forever
        """
        self.timeout = timeout

    async def run(self, executable: str, args: Sequence[str]) -> str:
        """
        Run a tool and return its stdout

        Args:
            executable: Program name or path
            args: Arguments, in order

        Returns:
            Decoded standard output

        Raises:
            ProcessFailure: the program could not be started, timed out,
                or exited with a non-zero code
        """
        cmd = [executable, *[str(a) for a in args]]
        logger.debug(f"[runner] Executing: {cmd}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessFailure(
                f"{executable} failed to launch: {e}",
                executable=executable,
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._kill(process)
            raise ProcessFailure(
                f"{executable} timed out after {self.timeout:.0f}s",
                executable=executable,
            )
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        out = stdout.decode("utf-8", errors="replace")
        err = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            tail = err.strip()[-STDERR_TAIL:]
            raise ProcessFailure(
                f"{executable} exited with code {process.returncode}: {tail}",
                executable=executable,
                returncode=process.returncode,
                stderr=err,
            )

        if err.strip():
            logger.debug(f"[runner] {executable} stderr: {err.strip()[-STDERR_TAIL:]}")
        return out

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()
