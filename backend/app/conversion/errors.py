"""Conversion pipeline errors."""
from app.conversion.models import MediaCategory


class ConversionError(Exception):
    """Base error for the conversion pipeline."""


class ValidationError(ConversionError):
    """Client-caused problem detected before any conversion work starts."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class EmptyBatchError(ValidationError):
    pass


class BatchTooLargeError(ValidationError):
    pass


class UnsupportedTargetFormatError(ValidationError):
    pass


class EmptyFileError(ValidationError):
    pass


class FileTooLargeError(ValidationError):
    pass


class UnsupportedMimeTypeError(ValidationError):
    pass


class IncompatibleConversionError(ValidationError):
    def __init__(self, input_category: MediaCategory, target_category: MediaCategory):
        super().__init__(
            f"Conversion from {input_category.value.upper()} to {target_category.value.upper()} is not allowed."
        )
        self.input_category = input_category
        self.target_category = target_category


class NoSuccessfulConversionsError(ConversionError):
    """Every file in a valid batch failed to convert."""


class PackagingError(ConversionError):
    """Building the download artifact failed."""
