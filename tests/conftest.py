"""Shared test fixtures for the ytscribe test suite.

Provides a realistic YouTube auto-caption track (header, cue timings with
positioning, word-timing lines, repeated cue text, a noise marker), fake
yt-dlp collaborators, and a fixture that undoes the root-logger changes
made by setup_logging.
"""

import logging
import os
from typing import Dict, List

import pytest

from ytscribe.caption_fetcher import CaptionFetcher
from ytscribe.channel_lister import ChannelLister
from ytscribe.exceptions import CaptionFetchError
from ytscribe.models import ChannelInfo


AUTO_CAPTION_VTT = """WEBVTT
Kind: captions
Language: en

00:00:00.000 --> 00:00:02.350 align:start position:0%

hello<00:00:00.320><c> everyone</c><00:00:00.640><c> welcome</c>

00:00:02.350 --> 00:00:02.360 align:start position:0%
hello everyone welcome


00:00:02.360 --> 00:00:05.190 align:start position:0%
hello everyone welcome
to<00:00:02.560><c> the</c><00:00:02.720><c> show</c>

00:00:05.190 --> 00:00:05.200 align:start position:0%
to the show


00:00:05.200 --> 00:00:07.000 align:start position:0%
to the show
[Music]
"""

AUTO_CAPTION_TEXT = "hello everyone welcome to the show"


@pytest.fixture
def auto_caption_lines() -> List[str]:
    """The sample caption track split into lines, terminators kept."""
    return AUTO_CAPTION_VTT.splitlines(keepends=True)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put the originals back after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class FakeChannelLister(ChannelLister):
    """Returns a fixed channel listing."""

    def __init__(self, channel_name: str, video_ids: List[str]):
        self.info = ChannelInfo(
            channel_name=channel_name,
            video_urls=[f"https://www.youtube.com/watch?v={video_id}" for video_id in video_ids],
        )
        self.requested: List[str] = []

    def list_channel(self, channel_url: str) -> ChannelInfo:
        self.requested.append(channel_url)
        return self.info


class FakeCaptionFetcher(CaptionFetcher):
    """
    Writes canned caption files into the work dir, the way yt-dlp would.

    ``tracks`` maps a video URL to {file name: content}. URLs listed in
    ``failing`` raise CaptionFetchError; unknown URLs have no captions.
    """

    def __init__(self, tracks: Dict[str, Dict[str, str]], failing: List[str] = ()):
        self.tracks = tracks
        self.failing = set(failing)
        self.work_dirs: List[str] = []

    def fetch(self, video_url: str, work_dir: str) -> List[str]:
        self.work_dirs.append(work_dir)
        os.makedirs(work_dir, exist_ok=True)
        if video_url in self.failing:
            raise CaptionFetchError(f"yt-dlp failed with exit code 1 for {video_url}")
        paths = []
        for name, content in sorted(self.tracks.get(video_url, {}).items()):
            path = os.path.join(work_dir, name)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
            paths.append(path)
        return paths
