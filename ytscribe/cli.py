"""Command-Line Interface handler for ytscribe."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .batch_runner import BatchRunner, resolve_worker_count
from .caption_fetcher import YtDlpCaptionFetcher
from .channel_lister import YtDlpChannelLister
from .config_loader import ConfigLoader
from .exceptions import ConfigurationError, YtScribeError
from .log_setup import setup_logging
from .models import BatchSummary
from .transcript_generator import TranscriptGenerator
from .utils import ensure_dir_exists, sanitize_filename

logger = logging.getLogger(__name__) # Get logger for this module


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


class CLIHandler:
    """Parses arguments and orchestrates a channel-wide transcript download."""

    def __init__(self, channel_lister=None, caption_fetcher=None):
        """
        Args:
            channel_lister: Overrides the yt-dlp channel lister (used in tests).
            caption_fetcher: Overrides the yt-dlp caption fetcher (used in tests).
        """
        self.parser = self._create_parser()
        self.channel_lister = channel_lister
        self.caption_fetcher = caption_fetcher

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            prog="ytscribe",
            description="ytscribe: Download the auto-generated transcripts of every video on a YouTube channel as Markdown.",
            epilog="Example: ytscribe https://www.youtube.com/@JitteredTV --limit 1",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        parser.add_argument(
            "channel_url",
            help="URL of the YouTube channel (or playlist) to process."
        )
        parser.add_argument(
            "--limit",
            type=_positive_int,
            default=None,
            help="Process only the first N videos of the channel."
        )
        parser.add_argument(
            "-o", "--output-dir",
            default=None, # Default taken from config
            help="Parent directory for the per-channel transcript folder."
        )
        parser.add_argument(
            "-c", "--config",
            default=None,
            help="Path to an optional configuration YAML file."
        )
        parser.add_argument(
            "--workers",
            type=_positive_int,
            default=None, # Default derived from config and CPU count
            help="Number of videos processed concurrently."
        )
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        return parser

    def _report(self, summary: BatchSummary) -> None:
        saved = sum(len(outcome.result.saved_paths) for outcome in summary.succeeded)
        unavailable = sum(1 for outcome in summary.succeeded if not outcome.result.transcript_available)
        logger.info(f"Saved {saved} transcript(s) from {len(summary.succeeded)} video(s).")
        if unavailable:
            logger.info(f"{unavailable} video(s) had no transcript available.")
        for outcome in summary.failed:
            logger.error(f"Failed to download transcript for {outcome.item}: {outcome.error}")

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Parses arguments, sets up logging, loads config, and processes the channel.

        Returns:
            The process exit code: 0 when every video succeeded, 1 on
            configuration, listing or per-video failures, 2 on unexpected errors.
        """
        args = self.parser.parse_args(argv)

        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        setup_logging(log_level=log_level)

        try:
            config = ConfigLoader().load_with_defaults(args.config)
        except (ConfigurationError, FileNotFoundError) as e:
            logger.critical(f"Failed to load configuration: {e}")
            return 1

        # Re-configure logging with the paths from the config
        setup_logging(log_level=log_level, log_dir=config['log_dir'], log_file=config['log_file'])

        if args.output_dir:
            logger.info(f"Overriding output_dir from config with CLI argument: {args.output_dir}")
            config['output_dir'] = args.output_dir
        worker_count = args.workers or resolve_worker_count(config['max_workers'])

        try:
            logger.info(f"Processing channel: {args.channel_url}")
            lister = self.channel_lister or YtDlpChannelLister(config['yt_dlp_options'])
            channel_info = lister.list_channel(args.channel_url)
            logger.info(f"Channel: {channel_info.channel_name}")
            logger.info(f"Found {len(channel_info.video_urls)} videos")

            videos = channel_info.video_urls
            if args.limit is not None and args.limit < len(videos):
                videos = videos[:args.limit]
                logger.info(f"Processing first {args.limit} video(s)")

            channel_dir_name = sanitize_filename(channel_info.channel_name) or "youtube_channel"
            output_dir = os.path.join(config['output_dir'], channel_dir_name)
            ensure_dir_exists(output_dir)
            logger.info(f"Output directory: {os.path.abspath(output_dir)}")

            generator = TranscriptGenerator(
                config=config,
                output_dir=output_dir,
                caption_fetcher=self.caption_fetcher or YtDlpCaptionFetcher(config['yt_dlp_options']),
            )
            runner = BatchRunner(max_workers=worker_count)
            summary = runner.run(videos, generator.generate)
            self._report(summary)

            if summary.failed:
                logger.error(f"{len(summary.failed)}/{len(videos)} videos failed.")
                return 1
            logger.info("All transcripts downloaded successfully!")
            return 0

        except YtScribeError as e:
            logger.error(f"A ytscribe error occurred: {e}")
            return 1
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            return 1
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            return 2 # Use a different exit code for unexpected crashes


def main() -> None:
    """Console-script entry point."""
    sys.exit(CLIHandler().run())
