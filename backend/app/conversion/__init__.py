from .errors import ConversionError, NoSuccessfulConversionsError, PackagingError, ValidationError
from .formats import DEFAULT_REGISTRY, FormatRegistry
from .models import ConvertedArtifact, InputFile, MediaCategory
from .service import ConversionService, get_conversion_service

__all__ = [
    "ConversionError",
    "ConversionService",
    "ConvertedArtifact",
    "DEFAULT_REGISTRY",
    "FormatRegistry",
    "InputFile",
    "MediaCategory",
    "NoSuccessfulConversionsError",
    "PackagingError",
    "ValidationError",
    "get_conversion_service",
]
