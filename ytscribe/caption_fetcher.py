"""Downloads auto-generated caption tracks with yt-dlp."""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import yt_dlp

from .exceptions import CaptionFetchError
from .log_setup import YtDlpLogger
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

CAPTION_FORMAT = 'vtt'


class CaptionFetcher(ABC):
    """Abstract base class for caption download services."""

    @abstractmethod
    def fetch(self, video_url: str, work_dir: str) -> List[str]:
        """
        Downloads the caption track(s) of a video into work_dir.

        Args:
            video_url: The video's watch URL.
            work_dir: A directory owned by this call; caption files land here.

        Returns:
            Paths of the downloaded caption files. Empty when the video has
            no transcript available.

        Raises:
            CaptionFetchError: If the download fails.
        """
        pass


class YtDlpCaptionFetcher(CaptionFetcher):
    """Fetches automatic captions in WebVTT format, skipping the media itself."""

    def __init__(self, extra_options: Optional[Dict[str, Any]] = None):
        self.extra_options = dict(extra_options or {})

    def _build_options(self, work_dir: str) -> Dict[str, Any]:
        options = {
            'writeautomaticsub': True,
            'subtitlesformat': CAPTION_FORMAT,
            'skip_download': True,
            'outtmpl': os.path.join(work_dir, '%(title)s'),
            'quiet': True,
            'no_warnings': False,
            'logger': YtDlpLogger(__name__ + '.yt_dlp'),
        }
        options.update(self.extra_options)
        return options

    def fetch(self, video_url: str, work_dir: str) -> List[str]:
        ensure_dir_exists(work_dir)
        try:
            with yt_dlp.YoutubeDL(self._build_options(work_dir)) as ydl:
                return_code = ydl.download([video_url])
        except yt_dlp.utils.DownloadError as e:
            logger.error(f"yt-dlp failed to fetch captions for {video_url}: {e}")
            raise CaptionFetchError(f"Could not fetch captions for {video_url}: {e}") from e

        if return_code != 0:
            raise CaptionFetchError(f"yt-dlp failed with exit code {return_code} for {video_url}")

        caption_files = sorted(
            os.path.join(work_dir, name)
            for name in os.listdir(work_dir)
            if name.endswith(f'.{CAPTION_FORMAT}')
        )
        logger.debug(f"Found {len(caption_files)} caption file(s) for {video_url}: {caption_files}")
        return caption_files
