"""
Resolver data models

Frames and slots used while rendering one file: the conditional nesting
stack, open @block regions, and the placeholders left in the output for
blocks and extended templates.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Union

from .scanner import DirectiveLine, Line


@dataclass
class ConditionalFrame:
    """
    One open @if / @ifdef / @ifndef / @exclude block

    Attributes:
        keyword: Directive that opened the frame (named in unterminated errors)
        line_number: Line the frame was opened on
        parent_emitting: Emit state of the enclosing level
        emitting: Whether lines at this depth are currently emitted
                  (already ANDed with parent_emitting)
        matched: Whether any branch at this depth has matched so far
        else_seen: Whether @else has been consumed for this frame
    """
    keyword: str
    line_number: int
    parent_emitting: bool
    emitting: bool
    matched: bool
    else_seen: bool = False


@dataclass
class BlockFrame:
    """
    One open @block region

    Attributes:
        name: Block name given to @block
        line_number: Line the block was opened on
        active: Block opened while emitting (inactive blocks are not defined)
        overridden: An extending file supplied content for this block, so the
                    default content between @block and @endblock is dropped
        content: Segments collected for the block's default content
    """
    name: str
    line_number: int
    active: bool
    overridden: bool
    content: List["Segment"] = field(default_factory=list)


@dataclass
class BlockSlot:
    """
    Position of a closed block in its parent's output

    Expanded in place when the file is rendered on its own; dropped when the
    file extends a template (the content travels to the template instead).
    """
    name: str
    content: List["Segment"]


@dataclass
class ExtendSlot:
    """
    Position of an @extend directive, resolved once the whole file is scanned

    The template is rendered only after every block of the extending file is
    known, then spliced at this position.
    """
    directive: DirectiveLine


@dataclass(frozen=True)
class IncludeRequest:
    """
    A resolved @include / @include-static / @extend target

    Attributes:
        path: Normalized path of the target (srcDir joined with the argument)
        keyword: Directive that requested the file
        includer: File containing the directive ("<string>" for in-memory sources)
        context: Caller's context with "src" overwritten by path
    """
    path: str
    keyword: str
    includer: str
    context: Mapping[str, Any]


Segment = Union[Line, BlockSlot, ExtendSlot]
