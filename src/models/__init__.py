"""
Models package for prepro

Contains data structures and type definitions for the preprocessing pipeline.
"""

from .state import ProgramState, pipeline
from .directives import DirectiveSpec, DirectiveCategory, RESERVED_CONTEXT_KEYS
from .scanner import CommentStyle, DirectiveSyntax, Line, DirectiveLine
from .resolver import ConditionalFrame, BlockFrame, BlockSlot, ExtendSlot, IncludeRequest
from .options import PreprocessOptions, options_coerce

__all__ = [
    "ProgramState",
    "pipeline",
    "DirectiveSpec",
    "DirectiveCategory",
    "RESERVED_CONTEXT_KEYS",
    "CommentStyle",
    "DirectiveSyntax",
    "Line",
    "DirectiveLine",
    "ConditionalFrame",
    "BlockFrame",
    "BlockSlot",
    "ExtendSlot",
    "IncludeRequest",
    "PreprocessOptions",
    "options_coerce",
]
