"""Format registry: which MIME types and extensions belong to which media category."""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from app.conversion.models import MediaCategory

# category -> (MIME types, extensions). Extend by adding entries here.
FORMAT_TABLE: dict[MediaCategory, tuple[tuple[str, ...], tuple[str, ...]]] = {
    MediaCategory.IMAGE: (
        ("image/jpeg", "image/png", "image/bmp"),
        ("jpg", "jpeg", "png", "bmp"),
    ),
    MediaCategory.VIDEO: (
        ("video/mp4", "video/x-msvideo", "video/quicktime", "video/x-flv"),
        ("mp4", "avi", "mov", "flv"),
    ),
    MediaCategory.AUDIO: (
        ("audio/mpeg", "audio/wav", "audio/3gpp", "audio/midi", "audio/x-midi"),
        ("mp3", "wav", "3gp", "midi"),
    ),
}

# (source, target) pairs the converter is allowed to attempt
ALLOWED_CONVERSIONS: frozenset[tuple[MediaCategory, MediaCategory]] = frozenset({
    (MediaCategory.IMAGE, MediaCategory.IMAGE),
    (MediaCategory.AUDIO, MediaCategory.AUDIO),
    (MediaCategory.VIDEO, MediaCategory.VIDEO),
    (MediaCategory.VIDEO, MediaCategory.AUDIO),
})


def normalize_format(value: Optional[str]) -> str:
    """Lower-case and drop a leading dot: '.JPG' -> 'jpg'."""
    return (value or "").strip().lower().lstrip(".")


@dataclass(frozen=True)
class FormatRegistry:
    """Read-only lookup tables. Build once and share; never mutated."""

    mime_types: Mapping[str, MediaCategory]
    extensions: Mapping[str, MediaCategory]
    conversions: frozenset[tuple[MediaCategory, MediaCategory]]

    @classmethod
    def from_table(
        cls,
        table: Mapping[MediaCategory, tuple[Iterable[str], Iterable[str]]],
        conversions: Iterable[tuple[MediaCategory, MediaCategory]] = ALLOWED_CONVERSIONS,
    ) -> "FormatRegistry":
        mimes: dict[str, MediaCategory] = {}
        exts: dict[str, MediaCategory] = {}
        for category, (mime_types, extensions) in table.items():
            for mime in mime_types:
                mimes[mime] = category
            for ext in extensions:
                exts[normalize_format(ext)] = category
        return cls(
            mime_types=MappingProxyType(mimes),
            extensions=MappingProxyType(exts),
            conversions=frozenset(conversions),
        )

    def classify_by_mime(self, mime: Optional[str]) -> MediaCategory:
        if not mime:
            return MediaCategory.UNKNOWN
        return self.mime_types.get(mime, MediaCategory.UNKNOWN)

    def classify_by_extension(self, format_string: Optional[str]) -> MediaCategory:
        return self.extensions.get(normalize_format(format_string), MediaCategory.UNKNOWN)

    @property
    def allowed_mime_types(self) -> frozenset[str]:
        return frozenset(self.mime_types)

    def is_conversion_allowed(self, source: MediaCategory, target: MediaCategory) -> bool:
        return (source, target) in self.conversions

    def describe(self) -> dict:
        """Registry contents for the /api/formats endpoint."""
        out: dict = {}
        for category in MediaCategory:
            if category == MediaCategory.UNKNOWN:
                continue
            out[category.value] = {
                "mime_types": sorted(m for m, c in self.mime_types.items() if c == category),
                "extensions": sorted(e for e, c in self.extensions.items() if c == category),
            }
        out["conversions"] = sorted(f"{s.value}->{t.value}" for s, t in self.conversions)
        return out


DEFAULT_REGISTRY = FormatRegistry.from_table(FORMAT_TABLE)
