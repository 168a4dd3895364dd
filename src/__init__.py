"""
prepro - Directive-based text preprocessor

Conditional blocks, file inclusion/extension and variable substitution
embedded in the comments of HTML, C-like and shell-like sources.
"""

__version__ = "1.0.0"

from .lib import (
    preprocess,
    preprocessFile,
    preprocessFileSync,
    Preprocessor,
    DirectiveRegistry,
    PreprocessError,
    StructuralError,
    IncludeNotFoundError,
    CircularIncludeError,
    UnsupportedTypeError,
    EncodingError,
    LOG,
    state_connectToLogger,
)
from .models import PreprocessOptions

__all__ = [
    "preprocess",
    "preprocessFile",
    "preprocessFileSync",
    "PreprocessOptions",
    "Preprocessor",
    "DirectiveRegistry",
    "PreprocessError",
    "StructuralError",
    "IncludeNotFoundError",
    "CircularIncludeError",
    "UnsupportedTypeError",
    "EncodingError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
