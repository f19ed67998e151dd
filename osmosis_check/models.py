# Defines the data structures shared by the fetcher, classifier, runner and exporter.

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class DetectionMethod(str, enum.Enum):
    """Which detection tier produced the verdict for a page."""

    STRUCTURED_DATA = "structured-data"
    PLAYBACK_CONTROL = "playback-control-marker"
    HTML5_VIDEO = "html5-video-tag"
    YOUTUBE_EMBED = "youtube-embed"
    NOT_FOUND = "not-found"
    ERROR = "error"


class ErrorKind(str, enum.Enum):
    """Coarse failure category shown to the user next to a failed URL."""

    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    OTHER = "other"


@dataclass(frozen=True)
class DetectionResult:
    """
    The classifier's verdict for one page.

    Diagnostic counts are literal occurrence counts and are filled in
    regardless of which tier decided `has_video`.
    """

    has_video: bool
    method: DetectionMethod
    structured_type: str | None = None
    playback_control_count: int = 0
    video_tag_count: int = 0
    iframe_count: int = 0
    youtube_embed_count: int = 0
    playback_snippet: str | None = None

    @property
    def method_label(self) -> str:
        if self.method is DetectionMethod.STRUCTURED_DATA:
            return f"{self.method.value}:{self.structured_type}"
        return self.method.value

    @classmethod
    def empty(cls) -> "DetectionResult":
        """Zeroed result used for records whose fetch or classification failed."""
        return cls(has_video=False, method=DetectionMethod.ERROR)


@dataclass(frozen=True)
class CheckSuccess:
    """A URL that was fetched and classified."""

    url: str
    timestamp: str
    detection: DetectionResult

    @property
    def has_video(self) -> bool:
        return self.detection.has_video

    @property
    def status(self) -> str:
        return "Success"

    @property
    def is_error(self) -> bool:
        return False

    @property
    def method_label(self) -> str:
        return self.detection.method_label


@dataclass(frozen=True)
class CheckFailure:
    """A URL whose fetch or classification failed. Never reports a video."""

    url: str
    timestamp: str
    kind: ErrorKind
    message: str

    @property
    def has_video(self) -> bool:
        return False

    @property
    def status(self) -> str:
        return f"Error: {self.message}"

    @property
    def is_error(self) -> bool:
        return True

    @property
    def detection(self) -> DetectionResult:
        return DetectionResult.empty()

    @property
    def method_label(self) -> str:
        return DetectionMethod.ERROR.value


CheckRecord = Union[CheckSuccess, CheckFailure]


@dataclass(frozen=True)
class Progress:
    """1-based position of the URL currently being checked; (0, 0) when idle."""

    current: int = 0
    total: int = 0

    @property
    def running(self) -> bool:
        return self.total > 0
