"""Conversion request/response models."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional


class MediaCategory(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"


@dataclass
class InputFile:
    """One uploaded file as declared by the client."""

    filename: Optional[str]
    content_type: Optional[str]
    size: int
    stream: BinaryIO


@dataclass
class ConversionRequest:
    target_format: str
    files: list[InputFile] = field(default_factory=list)


@dataclass(frozen=True)
class ConvertedArtifact:
    """A finished output file. Whoever holds it is responsible for deleting `path`."""

    path: Path
    download_name: str


@dataclass(frozen=True)
class ConversionFailure:
    filename: Optional[str]
    reason: str


@dataclass
class BatchResult:
    artifacts: list[ConvertedArtifact] = field(default_factory=list)
    failures: list[ConversionFailure] = field(default_factory=list)


@dataclass(frozen=True)
class PackagedOutput:
    """Final file handed to the HTTP layer."""

    path: Path
    filename: str
    media_type: str
    archived: bool = False
