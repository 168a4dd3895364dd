"""
Conditional state machine

Tracks nested @if / @ifdef / @ifndef / @exclude blocks for one file and
decides whether the current line is emitted. Each file gets its own stack, so
an unterminated block inside an included file never leaks into its includer.

Transitions:
    push   (@if, @ifdef, @ifndef, @exclude)  emitting = outer AND cond
    elif                                     emitting = outer AND cond, unless a branch matched
    else                                     emitting = outer AND NOT matched
    pop    (@endif, @endexclude)

Example:
    >>> stack = ConditionalStack()
    >>> stack.push("if", False, 1)
    >>> stack.emitting
    False
    >>> stack.branch_else(3)
    >>> stack.emitting
    True
"""

from typing import List, Optional

from ..models.resolver import ConditionalFrame
from .errors import StructuralError
from .log import LOG


class ConditionalStack:
    """Stack of ConditionalFrame with the transitions of the state machine"""

    def __init__(self, file: Optional[str] = None):
        """
        Args:
            file: File the stack belongs to (named in error messages)
        """
        self.file = file
        self.frames: List[ConditionalFrame] = []

    @property
    def emitting(self) -> bool:
        """Whether lines at the current depth are emitted"""
        return self.frames[-1].emitting if self.frames else True

    @property
    def depth(self) -> int:
        return len(self.frames)

    def push(self, keyword: str, condition: bool, line_number: int) -> None:
        """Open a new frame for @if / @ifdef / @ifndef / @exclude"""
        outer = self.emitting
        self.frames.append(
            ConditionalFrame(
                keyword=keyword,
                line_number=line_number,
                parent_emitting=outer,
                emitting=outer and condition,
                matched=condition,
            )
        )
        LOG(f"@{keyword} at line {line_number}: depth {self.depth}, emitting={self.emitting}", level=3, source=self.file)

    def frame_top(self, keyword: str, line_number: int) -> ConditionalFrame:
        """
        Return the innermost frame for a branch directive

        Raises:
            StructuralError: If no frame is open, or the frame already saw @else
        """
        if not self.frames:
            raise StructuralError(f"@{keyword} without a matching @if", self.file, line_number)
        frame = self.frames[-1]
        if frame.keyword == 'exclude':
            raise StructuralError(
                f"@{keyword} inside @exclude opened at line {frame.line_number}",
                self.file,
                line_number,
            )
        if frame.else_seen:
            raise StructuralError(
                f"@{keyword} after @else (block opened at line {frame.line_number})",
                self.file,
                line_number,
            )
        return frame

    def branch_elif(self, condition: bool, line_number: int) -> None:
        """Switch to an @elif branch"""
        frame = self.frame_top("elif", line_number)
        if frame.matched:
            frame.emitting = False
        else:
            frame.emitting = frame.parent_emitting and condition
            frame.matched = condition

    def branch_else(self, line_number: int) -> None:
        """Switch to the @else branch"""
        frame = self.frame_top("else", line_number)
        frame.emitting = frame.parent_emitting and not frame.matched
        frame.matched = True
        frame.else_seen = True

    def pop(self, keyword: str, line_number: int, opener: Optional[str] = None) -> ConditionalFrame:
        """
        Close the innermost frame

        Args:
            keyword: Closing directive (for messages)
            line_number: Line of the closing directive
            opener: When given, the frame must have been opened by this keyword
                    (used to pair @endexclude with @exclude)

        Raises:
            StructuralError: If the stack is empty or the closer does not match
        """
        if not self.frames:
            raise StructuralError(f"@{keyword} without a matching opening directive", self.file, line_number)
        frame = self.frames[-1]
        if opener is not None and frame.keyword != opener:
            raise StructuralError(
                f"@{keyword} closes @{frame.keyword} opened at line {frame.line_number}",
                self.file,
                line_number,
            )
        if opener is None and frame.keyword == 'exclude':
            raise StructuralError(
                f"@{keyword} inside @exclude opened at line {frame.line_number}",
                self.file,
                line_number,
            )
        return self.frames.pop()

    def finish(self) -> None:
        """
        Check the stack is empty at end of input

        Raises:
            StructuralError: Naming the innermost unterminated directive
        """
        if self.frames:
            frame = self.frames[-1]
            raise StructuralError(
                f"Unterminated @{frame.keyword} opened at line {frame.line_number}",
                self.file,
                frame.line_number,
            )
