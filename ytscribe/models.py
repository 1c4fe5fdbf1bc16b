"""Data models for ytscribe."""

from dataclasses import dataclass, field
from typing import Any, List, Optional

@dataclass(frozen=True)
class CaptionLine:
    """One line of a raw caption-track file, in file order."""
    index: int
    raw: str

    @property
    def text(self) -> str:
        return self.raw.strip()

@dataclass
class TranscriptDocument:
    """A reflowed transcript: title, originating video reference and prose paragraphs."""
    title: str
    source: str
    paragraphs: List[str] = field(default_factory=list)
    # The last paragraph is "open" when it came from the end-of-input flush
    # rather than the length threshold; it is written with a single newline.
    trailing_open: bool = False

    def to_markdown(self) -> str:
        """Renders the document as Markdown text."""
        parts = [
            f"# {self.title}\n\n",
            f"**Video URL:** {self.source}\n\n",
            "---\n\n",
            "## Transcript\n\n",
        ]
        last = len(self.paragraphs) - 1
        for i, paragraph in enumerate(self.paragraphs):
            terminator = "\n" if (i == last and self.trailing_open) else "\n\n"
            parts.append(f"{paragraph}{terminator}")
        return "".join(parts)

@dataclass
class ChannelInfo:
    """A channel's display name and its videos, in listing order."""
    channel_name: str
    video_urls: List[str] = field(default_factory=list)

@dataclass
class VideoResult:
    """Outcome of processing one video's captions."""
    video_url: str
    saved_paths: List[str] = field(default_factory=list)
    transcript_available: bool = True

@dataclass
class TaskOutcome:
    """Result or captured error of one task in a batch run."""
    index: int
    item: Any
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

@dataclass
class BatchSummary:
    """Aggregate of all task outcomes, ordered by submission index."""
    outcomes: List[TaskOutcome] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> List[TaskOutcome]:
        return [outcome for outcome in self.outcomes if outcome.succeeded]

    @property
    def failed(self) -> List[TaskOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]
