from .logging_context import ImportLoggingContext
from .post_import import ImportResult, PostImportProcessor

__all__ = [
    "ImportLoggingContext",
    "ImportResult",
    "PostImportProcessor",
]
