"""Batch and per-file checks run before any conversion work starts."""
import logging
from typing import Sequence

from app.conversion.errors import (
    BatchTooLargeError,
    EmptyBatchError,
    EmptyFileError,
    FileTooLargeError,
    IncompatibleConversionError,
    UnsupportedMimeTypeError,
    UnsupportedTargetFormatError,
)
from app.conversion.formats import FormatRegistry
from app.conversion.models import InputFile, MediaCategory

logger = logging.getLogger("converter.validation")


class InputValidator:
    """Fail-fast validation: the first violation aborts the whole batch."""

    def __init__(self, registry: FormatRegistry, max_files: int, max_file_size: int):
        self.registry = registry
        self.max_files = max_files
        self.max_file_size = max_file_size

    def validate(self, target_format: str, files: Sequence[InputFile]) -> MediaCategory:
        """Return the target category, or raise a ValidationError subclass."""
        if not files:
            raise EmptyBatchError("No files were selected.")
        if len(files) > self.max_files:
            raise BatchTooLargeError(f"You can upload at most {self.max_files} files at once.")

        target_category = self.registry.classify_by_extension(target_format)
        if target_category == MediaCategory.UNKNOWN:
            raise UnsupportedTargetFormatError(f"Target format '{target_format}' is not supported.")

        allowed_mimes = self.registry.allowed_mime_types
        max_mb = self.max_file_size // (1024 * 1024)
        for f in files:
            name = f.filename or "unnamed"
            if f.size <= 0:
                raise EmptyFileError(f"File '{name}' is empty.")
            if f.size > self.max_file_size:
                raise FileTooLargeError(f"File '{name}' is too large (limit: {max_mb} MB).")
            mime = f.content_type
            if not mime or mime not in allowed_mimes:
                raise UnsupportedMimeTypeError(f"File format ({f.content_type}) is not supported.")

            input_category = self.registry.classify_by_mime(mime)
            if not self.registry.is_conversion_allowed(input_category, target_category):
                raise IncompatibleConversionError(input_category, target_category)

        logger.debug("Validated %s file(s) for target %s", len(files), target_format)
        return target_category
