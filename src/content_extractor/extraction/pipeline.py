"""Extraction pipeline: classify the URL, run its strategy chains, never fail.

Video URLs run a transcript chain, then a metadata chain. Other URLs run the
article chain, then an Open Graph fallback. When everything fails the result
is a metadata placeholder naming the URL and platform.
"""

import asyncio
import logging
import math

from content_extractor.browser import scrape
from content_extractor.browser import transcript as browser_transcript
from content_extractor.browser.session import with_session
from content_extractor.capabilities import Capabilities, get_capabilities
from content_extractor.config import Settings, get_settings
from content_extractor.errors import ConfigurationError
from content_extractor.extraction import metadata, scrapingbee, youtube, ytdlp
from content_extractor.extraction import transcript as timed_text
from content_extractor.extraction.article import extract_article, extract_article_html
from content_extractor.extraction.chain import AttemptContext, Strategy, run_chain
from content_extractor.extraction.router import (
    classify,
    extract_video_id,
    extract_youtube_id,
    is_youtube_playlist,
)
from content_extractor.media.pipeline import transcribe_video
from content_extractor.models.content import ExtractedContent, PlatformKind, SourceType

logger = logging.getLogger(__name__)

ARTICLE_MIN_LENGTH = 100


class Extractor:
    """Builds strategy chains from settings and capabilities and runs them.

    Raises ConfigurationError on construction when the configuration cannot
    produce a usable chain. ``extract`` itself never raises for acquisition
    failures.
    """

    def __init__(self, settings: Settings | None = None, capabilities: Capabilities | None = None):
        self.settings = settings or get_settings()
        self.capabilities = capabilities or get_capabilities()
        # Every chain is built once up front so bad configuration fails here
        for platform in PlatformKind:
            self._validate(self.content_chain(platform))
            self._validate(self.fallback_chain(platform))
        if not self.article_chain():
            raise ConfigurationError("article chain has no strategies")

    @staticmethod
    def _validate(strategies: list[Strategy]) -> None:
        for strategy in strategies:
            if not math.isfinite(strategy.timeout) or strategy.timeout <= 0:
                raise ConfigurationError(f"strategy {strategy.name} has invalid timeout {strategy.timeout!r}")
            if strategy.min_length < 0:
                raise ConfigurationError(f"strategy {strategy.name} has negative min_length")

    @property
    def browser_available(self) -> bool:
        return self.capabilities.browser is not None

    # -- chain builders -------------------------------------------------

    def content_chain(self, platform: PlatformKind) -> list[Strategy]:
        if platform is PlatformKind.YOUTUBE:
            return self.youtube_transcript_chain()
        if platform.is_video:
            return self.media_transcript_chain(platform)
        return self.article_chain()

    def fallback_chain(self, platform: PlatformKind) -> list[Strategy]:
        if platform.is_video:
            return self.metadata_chain(platform)
        return self.open_graph_chain()

    def youtube_transcript_chain(self) -> list[Strategy]:
        chain = [
            Strategy("ytdlp-subtitles", 45.0, self._ytdlp_subtitles, SourceType.TRANSCRIPT),
            Strategy("transcript-api", 20.0, self._transcript_api, SourceType.TRANSCRIPT),
            Strategy("page-captions", 20.0, self._page_captions, SourceType.TRANSCRIPT),
        ]
        if self.settings.scrapingbee_keys:
            chain.append(Strategy("scrapingbee-captions", 45.0, self._scrapingbee_captions, SourceType.TRANSCRIPT))
        if self.browser_available:
            chain.append(
                Strategy(
                    "browser-transcript",
                    60.0,
                    self._browser_transcript,
                    SourceType.TRANSCRIPT,
                    requires_browser=True,
                )
            )
        return chain

    def media_transcript_chain(self, platform: PlatformKind) -> list[Strategy]:
        if self.settings.disable_video_transcription:
            return []

        async def run(url: str) -> str | None:
            return await transcribe_video(
                url,
                platform,
                media_id=extract_video_id(url, platform),
                settings=self.settings,
                capabilities=self.capabilities,
            )

        return [
            Strategy("media-transcription", self.settings.media_transcription_timeout, run, SourceType.TRANSCRIPT)
        ]

    def metadata_chain(self, platform: PlatformKind) -> list[Strategy]:
        chain = [Strategy("ytdlp-metadata", 30.0, self._ytdlp_metadata, SourceType.METADATA)]
        if platform is PlatformKind.YOUTUBE and self.settings.youtube_api_configured:
            chain.append(Strategy("youtube-data-api", 10.0, self._youtube_data_api, SourceType.METADATA))
        if self.browser_available:

            async def browser_metadata(url: str) -> str | None:
                return await self._browser_metadata(url, platform)

            chain.append(
                Strategy("browser-metadata", 90.0, browser_metadata, SourceType.METADATA, requires_browser=True)
            )
        if platform is PlatformKind.YOUTUBE:
            chain.append(Strategy("watch-page-details", 15.0, self._watch_page_details, SourceType.METADATA))
        chain += self.open_graph_chain()
        return chain

    def article_chain(self) -> list[Strategy]:
        chain = []
        if self.browser_available:
            chain.append(
                Strategy(
                    "browser-article",
                    90.0,
                    self._browser_article,
                    SourceType.ARTICLE,
                    min_length=ARTICLE_MIN_LENGTH,
                    requires_browser=True,
                )
            )
        chain.append(
            Strategy("trafilatura-article", 30.0, extract_article, SourceType.ARTICLE, min_length=ARTICLE_MIN_LENGTH)
        )
        if self.settings.scrapingbee_keys:
            chain.append(
                Strategy(
                    "scrapingbee-article",
                    45.0,
                    self._scrapingbee_article,
                    SourceType.ARTICLE,
                    min_length=ARTICLE_MIN_LENGTH,
                )
            )
        return chain

    def open_graph_chain(self) -> list[Strategy]:
        chain = [Strategy("open-graph", 10.0, self._open_graph, SourceType.METADATA)]
        if self.browser_available:
            chain.append(
                Strategy("browser-open-graph", 45.0, self._browser_open_graph, SourceType.METADATA, requires_browser=True)
            )
        return chain

    # -- strategy bodies --------------------------------------------------

    async def _ytdlp_subtitles(self, url: str) -> str | None:
        return await ytdlp.fetch_subtitles(
            url, self.settings.transcript_language_list, self.capabilities.cookies_path
        )

    async def _transcript_api(self, url: str) -> str | None:
        video_id = extract_youtube_id(url)
        if video_id is None:
            return None
        return await youtube.fetch_transcript(video_id, self.settings)

    async def _page_captions(self, url: str) -> str | None:
        video_id = extract_youtube_id(url)
        if video_id is None:
            return None
        track = timed_text.select_track(
            await timed_text.fetch_caption_tracks(video_id), self.settings.transcript_language_list
        )
        if track is None:
            return None
        return await timed_text.download(track)

    async def _scrapingbee_captions(self, url: str) -> str | None:
        html = await scrapingbee.render_html(url, self.settings.scrapingbee_keys)
        return await timed_text.transcript_from_html(html, self.settings.transcript_language_list)

    async def _browser_transcript(self, url: str) -> str | None:
        return await with_session(
            self.capabilities.browser, lambda session: browser_transcript.extract_transcript(session, url)
        )

    async def _ytdlp_metadata(self, url: str) -> str | None:
        page = await ytdlp.dump_metadata(url, self.capabilities.cookies_path)
        return metadata.format_metadata(page) if page else None

    async def _youtube_data_api(self, url: str) -> str | None:
        video_id = extract_youtube_id(url)
        if video_id is None:
            return None
        page = await youtube.fetch_data_api_metadata(video_id, self.settings.youtube_api_key)
        return metadata.format_metadata(page) if page else None

    async def _browser_metadata(self, url: str, platform: PlatformKind) -> str | None:
        page = await with_session(
            self.capabilities.browser, lambda session: scrape.scrape_metadata(session, url, platform)
        )
        return metadata.format_metadata(page)

    async def _watch_page_details(self, url: str) -> str | None:
        video_id = extract_youtube_id(url)
        if video_id is None:
            return None
        return metadata.format_metadata(await youtube.fetch_watch_page_details(video_id))

    async def _open_graph(self, url: str) -> str | None:
        return metadata.format_metadata(await metadata.fetch_open_graph(url), page_only=True)

    async def _browser_open_graph(self, url: str) -> str | None:
        page = await with_session(self.capabilities.browser, lambda session: scrape.scrape_open_graph(session, url))
        return metadata.format_metadata(page, page_only=True)

    async def _browser_article(self, url: str) -> str | None:
        return await with_session(self.capabilities.browser, lambda session: scrape.scrape_article(session, url))

    async def _scrapingbee_article(self, url: str) -> str | None:
        html = await scrapingbee.render_html(url, self.settings.scrapingbee_keys)
        return await extract_article_html(html, url)

    # -- entry point ------------------------------------------------------

    async def extract(self, url: str) -> ExtractedContent:
        """Best-effort content for ``url``. Never raises for acquisition failures."""
        platform = classify(url)
        url = single_video_url(url, platform)
        context = AttemptContext(url=url, platform=platform)
        logger.info("Extracting %s as %s", url, platform.content_class)

        for chain in (self.content_chain(platform), self.fallback_chain(platform)):
            result = await run_chain(chain, context)
            if result is not None:
                return result

        logger.warning(
            "All strategies failed for %s, returning placeholder",
            url,
            extra={"platform": platform.value, "attempts": len(context.attempts)},
        )
        return ExtractedContent(
            content=metadata.placeholder(url, platform),
            source_type=SourceType.METADATA,
            url=url,
            platform=platform,
            extraction_method="placeholder",
            attempts=context.attempts,
        )


def single_video_url(url: str, platform: PlatformKind) -> str:
    """Reduce a YouTube playlist link to the video it points at. Playlists are not expanded."""
    if platform is PlatformKind.YOUTUBE and is_youtube_playlist(url):
        video_id = extract_youtube_id(url)
        if video_id:
            logger.info("Playlist URL %s, extracting only video %s", url, video_id)
            return f"https://www.youtube.com/watch?v={video_id}"
    return url


_default_extractor: Extractor | None = None


def get_extractor() -> Extractor:
    """Process-wide extractor built from cached settings and capabilities.

    Call it once at process startup: building it looks for a browser,
    ffmpeg and the speech model and writes the yt-dlp cookie file, all of
    which block.
    """
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = Extractor()
    return _default_extractor


def reset_extractor() -> None:
    """Forget the cached extractor. Used for testing."""
    global _default_extractor
    _default_extractor = None


async def extract(url: str) -> ExtractedContent:
    """Extract the best available textual representation of ``url``.

    Without a prior ``get_extractor()`` at startup, the extractor is built on
    first use in a worker thread so the event loop is not blocked.
    """
    extractor = _default_extractor or await asyncio.to_thread(get_extractor)
    return await extractor.extract(url)
