"""
Directive specification and metadata models

Defines the structure and categories of preprocessor directives for
recognition, validation, and registry management.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List, Set


class DirectiveCategory(Enum):
    """
    Categories of preprocessor directives

    Used for organization and to decide which directives still run inside a
    suppressed conditional branch.
    """
    CONDITIONAL = "conditional"      # @if, @ifdef, @elif, @else, @endif, @exclude
    INCLUSION = "inclusion"          # @include, @include-static, @extend
    BLOCK = "block"                  # @block, @endblock
    SUBSTITUTION = "substitution"    # @echo


@dataclass
class DirectiveSpec:
    """
    Specification for a preprocessor directive

    Defines metadata, validation rules, and handler for a directive.
    Used by DirectiveRegistry to manage the recognized keywords.

    Attributes:
        name: Directive keyword (without leading @)
        category: Category for organization
        description: Human-readable description
        handler: Function (directive, render) -> None applied to the line
        requires_argument: Whether the directive must carry an argument
        runs_when_suppressed: Whether the handler runs inside a suppressed
                              branch (needed to keep nesting balanced)
        examples: Example usage strings (listed in --help)
    """
    name: str
    category: DirectiveCategory
    description: str
    handler: Callable
    requires_argument: bool = False
    runs_when_suppressed: bool = False
    examples: List[str] = field(default_factory=list)

    def usage_format(self) -> str:
        """One help line: keyword, description and the first example"""
        example = f"  e.g. {self.examples[0]}" if self.examples else ""
        return f"@{self.name:<16}{self.description}{example}"


# Context keys injected by the preprocessor itself
RESERVED_CONTEXT_KEYS: Set[str] = {
    'src',   # path of the file currently being processed
}


def reserved_is(key: str) -> bool:
    """Check if a context key is reserved"""
    return key in RESERVED_CONTEXT_KEYS
