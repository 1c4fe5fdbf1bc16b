"""Reflows WebVTT auto-caption tracks into paragraphed prose transcripts.

Auto-generated YouTube captions repeat each cue's text across consecutive
timestamp blocks and carry karaoke-style word timing lines. The reflower
walks the caption lines once, drops everything that is not spoken text,
suppresses adjacent repeats and buffers the survivors into paragraphs of
roughly ``paragraph_threshold`` characters.
"""

import logging
import re
from collections import Counter
from typing import Callable, Iterable, List, Optional, Tuple

from .models import CaptionLine, TranscriptDocument

logger = logging.getLogger(__name__)

DEFAULT_PARAGRAPH_THRESHOLD = 500

METADATA_PREFIXES = ("WEBVTT", "Kind:", "Language:")
CUE_TIMING_PATTERN = re.compile(r"\d{2}:\d{2}:\d{2}\.\d{3} --> \d{2}:\d{2}:\d{2}\.\d{3}")
WORD_TIMING_PATTERN = re.compile(r"<\d{2}:\d{2}:\d{2}\.\d{3}><c>")
NOISE_MARKER_PATTERN = re.compile(r"\[.*\]")


def is_blank(line: str) -> bool:
    return not line

def is_metadata(line: str) -> bool:
    return line.startswith(METADATA_PREFIXES)

def is_cue_timing(line: str) -> bool:
    return CUE_TIMING_PATTERN.search(line) is not None

def has_word_timing(line: str) -> bool:
    return WORD_TIMING_PATTERN.search(line) is not None

def is_noise_marker(line: str) -> bool:
    """True for annotations such as "[Music]" that span the whole line."""
    return NOISE_MARKER_PATTERN.fullmatch(line) is not None


# Evaluated in order over the trimmed line; the first match drops it.
DROP_RULES: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    ("blank", is_blank),
    ("metadata", is_metadata),
    ("cue_timing", is_cue_timing),
    ("word_timing", has_word_timing),
    ("noise_marker", is_noise_marker),
)
DUPLICATE_RULE = "duplicate"


def classify_line(line: str, previous: str) -> Optional[str]:
    """
    Returns the name of the rule that drops ``line``, or None to keep it.

    Args:
        line: The trimmed caption line.
        previous: The text of the last retained line ("" at the start).
    """
    for name, rule in DROP_RULES:
        if rule(line):
            return name
    if line == previous:
        return DUPLICATE_RULE
    return None


class ParagraphAccumulator:
    """Space-joined text buffer that hands back a paragraph once it grows past a threshold."""

    def __init__(self, threshold: int = DEFAULT_PARAGRAPH_THRESHOLD):
        self.threshold = threshold
        self._parts: List[str] = []
        self._length = 0

    def __len__(self) -> int:
        return self._length

    def append(self, text: str) -> Optional[str]:
        """
        Adds text, then flushes if the buffer is now longer than the threshold.

        Returns:
            The completed paragraph if this append crossed the threshold, else None.
        """
        if self._parts:
            self._length += 1 # joining space
        self._parts.append(text)
        self._length += len(text)
        if self._length > self.threshold:
            return self.flush()
        return None

    def flush(self) -> Optional[str]:
        """Returns the buffered paragraph (trimmed) and empties the buffer; None if empty."""
        if not self._parts:
            return None
        paragraph = " ".join(self._parts).strip()
        self._parts = []
        self._length = 0
        return paragraph


class TranscriptReflower:
    """
    Converts caption-track lines into a TranscriptDocument.

    Instances hold only configuration, so a single reflower can be shared by
    every worker thread of a batch.
    """

    def __init__(self, paragraph_threshold: int = DEFAULT_PARAGRAPH_THRESHOLD):
        """
        Args:
            paragraph_threshold: Character count a paragraph must exceed before
                it is closed. A readability heuristic, not a caption boundary.
        """
        if paragraph_threshold < 1:
            raise ValueError(f"paragraph_threshold must be positive, got {paragraph_threshold}")
        self.paragraph_threshold = paragraph_threshold

    def reflow(self, lines: Iterable[str]) -> Tuple[List[str], bool]:
        """
        Runs the single-pass filter and paragraph reflow over raw lines.

        Args:
            lines: Raw caption-track lines in file order, with or without
                line terminators.

        Returns:
            A tuple ``(paragraphs, trailing_open)`` where ``trailing_open`` is
            True when the last paragraph was emitted at end of input rather
            than by crossing the threshold.
        """
        accumulator = ParagraphAccumulator(self.paragraph_threshold)
        paragraphs: List[str] = []
        dropped: Counter = Counter()
        previous = ""

        for index, raw in enumerate(lines):
            caption_line = CaptionLine(index=index, raw=raw)
            text = caption_line.text
            reason = classify_line(text, previous)
            if reason is not None:
                dropped[reason] += 1
                continue

            previous = text
            paragraph = accumulator.append(text)
            if paragraph is not None:
                paragraphs.append(paragraph)

        trailing_open = False
        remainder = accumulator.flush()
        if remainder is not None:
            paragraphs.append(remainder)
            trailing_open = True

        logger.debug(f"Reflowed into {len(paragraphs)} paragraphs; dropped lines by rule: {dict(dropped)}")
        return paragraphs, trailing_open

    def convert(self, lines: Iterable[str], title: str, source: str) -> TranscriptDocument:
        """
        Builds the transcript document for one caption track.

        Never raises on malformed caption content: unrecognized lines are
        treated as spoken text.

        Args:
            lines: Raw caption-track lines in file order.
            title: Document heading, usually from utils.derive_title.
            source: Originating video reference, e.g. its watch URL.
        """
        paragraphs, trailing_open = self.reflow(lines)
        return TranscriptDocument(
            title=title,
            source=source,
            paragraphs=paragraphs,
            trailing_open=trailing_open,
        )

    def to_markdown(self, lines: Iterable[str], title: str, source: str) -> str:
        """Shortcut for ``convert(...).to_markdown()``."""
        return self.convert(lines, title, source).to_markdown()
