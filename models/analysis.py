"""
Transient request/response values for the coaching relay.
Nothing here is persisted; uploads live only as files in the scratch directory.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Perspective(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    ALONE = "alone"

    @classmethod
    def parse(cls, value: str) -> Optional["Perspective"]:
        """Exact match only; anything else returns None."""
        for member in cls:
            if member.value == value:
                return member
        return None


class FileState(str, Enum):
    """Lifecycle states reported by the Gemini Files API."""
    STATE_UNSPECIFIED = "STATE_UNSPECIFIED"
    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


@dataclass
class AnalysisRequest:
    uploaded_path: str
    perspective: str


@dataclass
class RemoteVideo:
    """Handle to a video stored by the Gemini Files API."""
    name: str
    uri: str
    state: str
    mime_type: str = "video/mp4"

    @property
    def is_active(self) -> bool:
        return self.state == FileState.ACTIVE.value

    @property
    def is_failed(self) -> bool:
        return self.state == FileState.FAILED.value
