"""Tests for ExtractedContent, SourceType, PlatformKind and PageMetadata."""

import pytest
from pydantic import ValidationError

from content_extractor.models.content import (
    CaptionTrack,
    ExtractedContent,
    PageMetadata,
    PlatformKind,
    SourceType,
)


def test_extracted_content_minimal():
    content = ExtractedContent(content="Some text", source_type=SourceType.ARTICLE)
    assert content.content == "Some text"
    assert content.source_type == SourceType.ARTICLE
    assert content.platform == PlatformKind.NONE
    assert content.url is None
    assert content.extraction_method is None
    assert content.attempts == []


def test_extracted_content_rejects_empty_text():
    with pytest.raises(ValidationError):
        ExtractedContent(content="", source_type=SourceType.METADATA)


def test_source_type_values():
    assert SourceType.TRANSCRIPT.value == "transcript"
    assert SourceType.ARTICLE.value == "article"
    assert SourceType.METADATA.value == "metadata"


def test_platform_content_class():
    assert PlatformKind.YOUTUBE.content_class == "video:youtube"
    assert PlatformKind.VK.is_video
    assert PlatformKind.NONE.content_class == "article"
    assert not PlatformKind.NONE.is_video


def test_caption_track_is_frozen():
    track = CaptionTrack(locator_url="https://www.youtube.com/api/timedtext?v=x", language_code="en")
    with pytest.raises(ValidationError):
        track.language_code = "ru"


def test_page_metadata_is_empty():
    assert PageMetadata().is_empty
    assert not PageMetadata(title="T").is_empty
    assert not PageMetadata(comments=["a comment here"]).is_empty


def test_extracted_content_serialization():
    content = ExtractedContent(
        content="Transcript text",
        source_type=SourceType.TRANSCRIPT,
        url="https://youtu.be/dQw4w9WgXcQ",
        platform=PlatformKind.YOUTUBE,
        extraction_method="transcript-api",
    )
    data = content.model_dump(mode="json")
    assert data["source_type"] == "transcript"
    assert data["platform"] == "youtube"
