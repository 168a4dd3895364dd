"""
prepro - Directive-based text preprocessor

Conditional blocks, file inclusion/extension and variable substitution
embedded in the comments of HTML, C-like and shell-like sources.
"""

__version__ = "1.0.0"

from .api import preprocess, preprocessFile, preprocessFileSync
from .resolver import Preprocessor
from .directives import DirectiveRegistry
from .errors import (
    PreprocessError,
    StructuralError,
    IncludeNotFoundError,
    CircularIncludeError,
    UnsupportedTypeError,
    EncodingError,
)
from .log import LOG, state_connectToLogger

__all__ = [
    "preprocess",
    "preprocessFile",
    "preprocessFileSync",
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
