"""Subprocess helpers for yt-dlp and ffmpeg.

Child processes are killed when the awaiting coroutine is cancelled, so an
enclosing strategy timeout never leaves a download running in the background.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass

from content_extractor.errors import classify_message

logger = logging.getLogger(__name__)

STDERR_TAIL = 500


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_process(*cmd: str) -> ProcessResult:
    """Run ``cmd`` to completion and capture its output."""
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
            logger.info("Killed %s after cancellation", cmd[0])
        raise
    return ProcessResult(
        returncode=proc.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def cookie_args(cookies_path: str | None) -> list[str]:
    return ["--cookies", cookies_path] if cookies_path else []


async def run_ytdlp(*args: str) -> str:
    """Run the yt-dlp command line and return its stdout.

    A non-zero exit is classified from stderr (private video, sign-in, 429,
    unsupported URL) and raised.
    """
    result = await run_process(sys.executable, "-m", "yt_dlp", *args)
    if not result.ok:
        message = result.stderr.strip()[-STDERR_TAIL:] or f"yt-dlp exited with {result.returncode}"
        raise classify_message(message)
    return result.stdout
