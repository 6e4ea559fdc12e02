"""Data models and enums for the extraction pipeline."""

from content_extractor.models.content import (
    AttemptOutcome,
    CaptionTrack,
    ExtractedContent,
    ExtractionAttempt,
    PageMetadata,
    PlatformKind,
    SourceType,
)

__all__ = [
    "AttemptOutcome",
    "CaptionTrack",
    "ExtractedContent",
    "ExtractionAttempt",
    "PageMetadata",
    "PlatformKind",
    "SourceType",
]
