"""Lists the videos of a YouTube channel using yt-dlp."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional

import yt_dlp

from .exceptions import ChannelListingError
from .log_setup import YtDlpLogger
from .models import ChannelInfo

logger = logging.getLogger(__name__)

WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"

# Channel home pages list their Videos/Shorts/Live tabs as nested playlists
_MAX_TAB_DEPTH = 2


class ChannelLister(ABC):
    """Abstract base class for channel video listing services."""

    @abstractmethod
    def list_channel(self, channel_url: str) -> ChannelInfo:
        """
        Retrieves the display name and video URLs of a channel.

        Args:
            channel_url: The channel (or playlist) URL.

        Returns:
            A ChannelInfo with video watch URLs in listing order.

        Raises:
            ChannelListingError: If the listing cannot be retrieved.
        """
        pass


class YtDlpChannelLister(ChannelLister):
    """Lists a channel with yt-dlp's flat playlist extraction (no downloads)."""

    def __init__(self, extra_options: Optional[Dict[str, Any]] = None):
        """
        Args:
            extra_options: Additional yt-dlp options (cookies, proxy, ...),
                applied on top of the listing defaults.
        """
        self.options = {
            'extract_flat': 'in_playlist',
            'skip_download': True,
            'quiet': True,
            'no_warnings': False,
            'logger': YtDlpLogger(__name__ + '.yt_dlp'),
        }
        self.options.update(extra_options or {})

    def list_channel(self, channel_url: str) -> ChannelInfo:
        logger.info(f"Fetching channel information for: {channel_url}")
        try:
            with yt_dlp.YoutubeDL(self.options) as ydl:
                info = ydl.extract_info(channel_url, download=False)
                if info is None:
                    raise ChannelListingError(f"yt-dlp returned no information for {channel_url}")
                entries = list(self._iter_video_entries(ydl, info, depth=0))
        except yt_dlp.utils.DownloadError as e:
            logger.error(f"yt-dlp failed to list channel {channel_url}: {e}")
            raise ChannelListingError(f"Could not list channel {channel_url}: {e}") from e

        channel_name = self._find_channel_name(info, entries)
        video_urls = self._unique_watch_urls(entries)
        logger.info(f"Channel '{channel_name}' lists {len(video_urls)} videos.")
        return ChannelInfo(channel_name=channel_name, video_urls=video_urls)

    def _iter_video_entries(self, ydl: yt_dlp.YoutubeDL, info: Dict[str, Any], depth: int) -> Iterator[Dict[str, Any]]:
        """Yields flat video entries, descending into nested tab playlists."""
        for entry in info.get('entries') or []:
            if not entry:
                continue
            if entry.get('entries') is not None:
                yield from self._iter_video_entries(ydl, entry, depth + 1)
            elif self._is_playlist_reference(entry):
                if depth >= _MAX_TAB_DEPTH:
                    logger.debug(f"Skipping nested playlist beyond depth {depth}: {entry.get('url')}")
                    continue
                logger.debug(f"Resolving channel tab: {entry.get('url')}")
                tab_info = ydl.extract_info(entry['url'], download=False)
                if tab_info:
                    yield from self._iter_video_entries(ydl, tab_info, depth + 1)
            elif entry.get('id'):
                yield entry

    @staticmethod
    def _is_playlist_reference(entry: Dict[str, Any]) -> bool:
        return bool(entry.get('url')) and (
            entry.get('ie_key') == 'YoutubeTab' or entry.get('_type') == 'playlist'
        )

    @staticmethod
    def _find_channel_name(info: Dict[str, Any], entries: List[Dict[str, Any]]) -> str:
        for candidate in [info] + entries:
            name = candidate.get('channel') or candidate.get('uploader')
            if name:
                return name
        fallback = f"youtube_channel_{int(time.time() * 1000)}"
        logger.warning(f"Channel name not found in yt-dlp metadata. Using fallback name: {fallback}")
        return fallback

    @staticmethod
    def _unique_watch_urls(entries: List[Dict[str, Any]]) -> List[str]:
        seen = set()
        urls = []
        for entry in entries:
            video_id = entry['id']
            if video_id in seen:
                continue
            seen.add(video_id)
            urls.append(WATCH_URL_TEMPLATE.format(video_id=video_id))
        return urls
