"""Sequential fallback chains of extraction strategies.

A strategy is data: a name, a time budget, a coroutine and the quality tag of
what it produces. ``run_chain`` tries strategies in order and returns the
first result that is long enough. Nothing a strategy raises escapes it.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from content_extractor.errors import BrowserUnavailable, ErrorKind, classify_exception
from content_extractor.models.content import (
    AttemptOutcome,
    ExtractedContent,
    ExtractionAttempt,
    PlatformKind,
    SourceType,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_LENGTH = 50


@dataclass(frozen=True)
class Strategy:
    name: str
    timeout: float  # seconds
    run: Callable[[str], Awaitable[str | None]]
    source_type: SourceType
    min_length: int = DEFAULT_MIN_LENGTH
    requires_browser: bool = False


@dataclass
class AttemptContext:
    """Per-request state shared by all chains of one ``extract`` call."""

    url: str
    platform: PlatformKind = PlatformKind.NONE
    browser_unavailable: bool = False
    attempts: list[ExtractionAttempt] = field(default_factory=list)

    def record(
        self,
        strategy: Strategy,
        started_at: datetime,
        outcome: AttemptOutcome,
        duration: float = 0.0,
        reason: str | None = None,
        error_kind: ErrorKind | None = None,
    ) -> ExtractionAttempt:
        attempt = ExtractionAttempt(
            strategy_id=strategy.name,
            started_at=started_at,
            outcome=outcome,
            reason=reason,
            error_kind=error_kind,
            duration_seconds=round(duration, 3),
        )
        self.attempts.append(attempt)
        log = logger.info if outcome is not AttemptOutcome.FAILED else logger.warning
        log(
            "Strategy %s %s for %s%s",
            strategy.name,
            outcome.value,
            self.url,
            f": {reason}" if reason else "",
            extra={
                "strategy": strategy.name,
                "outcome": outcome.value,
                "error_kind": error_kind.value if error_kind else None,
                "duration_seconds": attempt.duration_seconds,
                "platform": self.platform.value,
            },
        )
        return attempt


async def run_strategy(strategy: Strategy, context: AttemptContext) -> ExtractedContent | None:
    """Run one strategy under its time budget and record the attempt."""
    started_at = datetime.now(timezone.utc)
    if strategy.requires_browser and context.browser_unavailable:
        context.record(strategy, started_at, AttemptOutcome.SKIPPED, reason="browser unavailable")
        return None

    start = time.monotonic()
    try:
        async with asyncio.timeout(strategy.timeout):
            text = await strategy.run(context.url)
    except Exception as exc:
        error = classify_exception(exc)
        if isinstance(error, BrowserUnavailable):
            context.browser_unavailable = True
        if error.kind is ErrorKind.UNEXPECTED:
            logger.exception("Unexpected error in strategy %s", strategy.name)
        context.record(
            strategy,
            started_at,
            AttemptOutcome.FAILED,
            duration=time.monotonic() - start,
            reason=str(error) or type(exc).__name__,
            error_kind=error.kind,
        )
        return None

    duration = time.monotonic() - start
    text = text.strip() if text else ""
    if len(text) <= strategy.min_length:
        reason = "no content" if not text else f"content too short ({len(text)} chars)"
        context.record(strategy, started_at, AttemptOutcome.FAILED, duration=duration, reason=reason)
        return None

    context.record(strategy, started_at, AttemptOutcome.SUCCESS, duration=duration)
    return ExtractedContent(
        content=text,
        source_type=strategy.source_type,
        url=context.url,
        platform=context.platform,
        extraction_method=strategy.name,
        attempts=context.attempts,
    )


async def run_chain(strategies: list[Strategy], context: AttemptContext) -> ExtractedContent | None:
    """Try ``strategies`` in order; the first sufficient result wins."""
    for strategy in strategies:
        result = await run_strategy(strategy, context)
        if result is not None:
            return result
    return None
