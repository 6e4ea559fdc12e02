"""Extracted content model, platform and source type enums."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from content_extractor.errors import ErrorKind


class SourceType(str, Enum):
    """Quality tag of extracted content, best first."""

    TRANSCRIPT = "transcript"
    ARTICLE = "article"
    METADATA = "metadata"


class PlatformKind(str, Enum):
    """Known video platforms. NONE means the URL is treated as an article."""

    YOUTUBE = "youtube"
    VK = "vk"
    TIKTOK = "tiktok"
    RUTUBE = "rutube"
    DZEN = "dzen"
    YANDEX = "yandex"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    NONE = "none"

    @property
    def is_video(self) -> bool:
        return self is not PlatformKind.NONE

    @property
    def content_class(self) -> str:
        """``video:<platform>`` for video platforms, ``article`` otherwise."""
        return f"video:{self.value}" if self.is_video else "article"


class CaptionTrack(BaseModel):
    """A located, language-tagged pointer to a timed-text transcript."""

    model_config = ConfigDict(frozen=True)

    locator_url: str
    language_code: str | None = None


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class ExtractionAttempt(BaseModel):
    """One strategy invocation. Telemetry only, never persisted."""

    strategy_id: str
    started_at: datetime
    outcome: AttemptOutcome
    reason: str | None = None
    error_kind: ErrorKind | None = None
    duration_seconds: float = 0.0


class ExtractedContent(BaseModel):
    """Content extracted from a URL: non-empty text plus a quality tag."""

    content: str = Field(min_length=1)
    source_type: SourceType
    url: str | None = None
    platform: PlatformKind = PlatformKind.NONE
    extraction_method: str | None = None  # Winning strategy name, or "placeholder"
    attempts: list[ExtractionAttempt] = Field(default_factory=list)


class PageMetadata(BaseModel):
    """Descriptive fields scraped from a page, before formatting."""

    title: str | None = None
    description: str | None = None
    extra_texts: list[str] = Field(default_factory=list)
    comments: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.description or self.extra_texts or self.comments)
