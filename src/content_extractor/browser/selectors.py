"""Versioned DOM selector tables loaded from selectors.yaml."""

import functools
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from content_extractor.models.content import PlatformKind

_CONFIG_PATH = Path(__file__).resolve().parent / "selectors.yaml"


class TranscriptSelectors(BaseModel):
    buttons: list[str]
    clickable: str
    button_texts: list[str]
    more_actions: list[str]
    menu_items: str
    menu_item_texts: list[str]
    panels: list[str]
    segment_text: str
    segments: str
    ignored_labels: list[str] = Field(default_factory=list)


class NavigationProfile(BaseModel):
    wait_until: Literal["domcontentloaded", "load", "networkidle", "commit"] = "domcontentloaded"
    timeout: float = 60.0  # seconds
    settle: float = 3.0  # seconds
    wait_for: str | None = None


class PlatformSelectors(BaseModel):
    title: list[str] = Field(default_factory=list)
    description: list[str] = Field(default_factory=list)
    text: list[str] = Field(default_factory=list)
    comments: list[str] = Field(default_factory=list)


class MetadataSelectors(BaseModel):
    title: list[str]
    description: list[str]
    platforms: dict[str, PlatformSelectors] = Field(default_factory=dict)


class ArticleSelectors(BaseModel):
    main_content: list[str]
    strip: str
    blocks: str


class SelectorTable(BaseModel):
    version: int
    transcript: TranscriptSelectors
    navigation: dict[str, NavigationProfile]
    metadata: MetadataSelectors
    article: ArticleSelectors

    def navigation_for(self, platform: PlatformKind) -> NavigationProfile:
        return self.navigation.get(platform.value) or self.navigation.get("default") or NavigationProfile()

    def metadata_for(self, platform: PlatformKind) -> PlatformSelectors:
        """Platform selectors first, then the generic ones."""
        specific = self.metadata.platforms.get(platform.value, PlatformSelectors())
        return PlatformSelectors(
            title=[*specific.title, *self.metadata.title],
            description=[*specific.description, *self.metadata.description],
            text=specific.text,
            comments=specific.comments,
        )


@functools.lru_cache
def load_selectors() -> SelectorTable:
    """Load and validate the selector tables. Result is cached."""
    with open(_CONFIG_PATH, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return SelectorTable.model_validate(data)
