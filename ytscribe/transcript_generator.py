"""Orchestrates the per-video transcript pipeline: fetch, reflow, write, clean up."""

import logging
import os
import shutil
import time
from typing import Optional

from .caption_fetcher import CaptionFetcher
from .exceptions import FileSystemError, FormattingError
from .models import VideoResult
from .reflower import TranscriptReflower
from .utils import derive_title, ensure_dir_exists, sanitize_filename, video_id_from_url

logger = logging.getLogger(__name__)


class TranscriptGenerator:
    """
    Produces Markdown transcripts for single videos of a channel.

    Safe to call from several worker threads at once: every video gets its
    own temporary directory and the reflower carries no per-call state.
    """

    def __init__(
        self,
        config: dict,
        output_dir: str,
        caption_fetcher: CaptionFetcher,
        reflower: Optional[TranscriptReflower] = None,
    ):
        """
        Initializes the TranscriptGenerator.

        Args:
            config: A dictionary containing configuration settings.
            output_dir: Directory receiving the transcript documents.
            caption_fetcher: Downloads caption tracks for a video.
            reflower: Converts caption lines into documents. Built from
                ``paragraph_char_threshold`` in config when omitted.
        """
        self.config = config
        self.output_dir = output_dir
        self.caption_fetcher = caption_fetcher
        self.reflower = reflower or TranscriptReflower(config.get('paragraph_char_threshold', 500))
        self.output_extension = config.get('output_extension', '.md')
        self.temp_root = os.path.join(output_dir, config.get('temp_dir_name', '.temp'))

    def _work_dir_for(self, video_url: str) -> str:
        return os.path.join(self.temp_root, sanitize_filename(video_id_from_url(video_url)) or 'video')

    def _cleanup_work_dir(self, work_dir: str) -> None:
        """Removes a video's temporary directory and anything left in it."""
        if os.path.isdir(work_dir):
            try:
                shutil.rmtree(work_dir)
                logger.debug(f"Cleaned up temporary directory: {work_dir}")
            except OSError as e:
                logger.warning(f"Could not remove temporary directory {work_dir}: {e}")

    def _output_path_for(self, title: str, video_url: str) -> str:
        base_name = sanitize_filename(title) or sanitize_filename(video_id_from_url(video_url)) or 'transcript'
        return os.path.join(self.output_dir, f"{base_name}{self.output_extension}")

    def convert_caption_file(self, caption_path: str, video_url: str) -> str:
        """
        Converts one downloaded caption file and writes the document next to the others.

        Args:
            caption_path: Path of the ``.vtt`` file.
            video_url: Originating video reference, shown in the document.

        Returns:
            Path of the written document.

        Raises:
            FileSystemError: If the caption file cannot be read.
            FormattingError: If the document cannot be written.
        """
        title = derive_title(caption_path)
        try:
            # utf-8-sig strips a BOM that would otherwise hide the WEBVTT header
            with open(caption_path, 'r', encoding='utf-8-sig', errors='replace') as f:
                document = self.reflower.convert(f, title=title, source=video_url)
        except OSError as e:
            logger.error(f"Could not read caption file {caption_path}: {e}")
            raise FileSystemError(f"Could not read caption file {caption_path}: {e}") from e

        output_path = self._output_path_for(title, video_url)
        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(document.to_markdown())
        except OSError as e:
            logger.error(f"Failed to write transcript to {output_path}: {e}", exc_info=True)
            raise FormattingError(f"Could not write transcript {output_path}: {e}") from e

        logger.debug(f"Wrote {len(document.paragraphs)} paragraphs to {output_path}")
        return output_path

    def generate(self, video_url: str, video_number: int = 1, total_videos: int = 1) -> VideoResult:
        """
        Executes the full transcript pipeline for a single video.

        Args:
            video_url: The video's watch URL.
            video_number: 1-based position in the batch, for progress logs.
            total_videos: Size of the batch, for progress logs.

        Returns:
            A VideoResult; ``transcript_available`` is False when the video
            has no captions (not an error).

        Raises:
            YtScribeError: For fetch, read or write failures.
        """
        progress = f"[{video_number}/{total_videos}]"
        start_time = time.time()
        ensure_dir_exists(self.output_dir)
        work_dir = self._work_dir_for(video_url)
        logger.info(f"{progress} Downloading: {video_url}")

        try:
            caption_files = self.caption_fetcher.fetch(video_url, work_dir)
            if not caption_files:
                logger.warning(f"{progress} No transcript available for: {video_url}")
                return VideoResult(video_url=video_url, transcript_available=False)

            result = VideoResult(video_url=video_url)
            for caption_path in caption_files:
                output_path = self.convert_caption_file(caption_path, video_url)
                result.saved_paths.append(output_path)
                logger.info(f"{progress} Saved: {os.path.basename(output_path)}")
                os.remove(caption_path)

            logger.info(f"{progress} Finished in {time.time() - start_time:.2f} seconds.")
            return result
        except OSError as e:
            raise FileSystemError(f"File system error while processing {video_url}: {e}") from e
        finally:
            self._cleanup_work_dir(work_dir)
