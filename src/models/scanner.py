"""
Scanner-specific data models

Type-safe structures for the grammar tables and for the line records the
scanner hands to the rest of the pipeline.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CommentStyle:
    """
    One pair of comment delimiters a directive may be wrapped in

    Attributes:
        open: Token that starts the comment (e.g. "<!--", "//", "#")
        close: Token that ends the comment, or "" for line comments

    Example:
        CommentStyle("/*", "*/") matches "/* @if DEBUG */"
        CommentStyle("//", "")   matches "// @if DEBUG"
    """
    open: str
    close: str = ""

    @property
    def isBlock(self) -> bool:
        """True for comments closed by an explicit token"""
        return bool(self.close)


@dataclass(frozen=True)
class DirectiveSyntax:
    """
    Directive grammar for one comment family

    Selected once per preprocessing run from the ``type`` option. Every family
    exposes the same contract: an ordered tuple of comment styles that may
    wrap a directive line.

    Attributes:
        family: Canonical family name ("html", "js", "coffee")
        comments: Comment styles tried in order when classifying a line
        bare: Whether directive lines without any comment wrapper count

    Example:
        DirectiveSyntax(
            family="html",
            comments=(CommentStyle("<!--", "-->"),),
            bare=True
        )
    """
    family: str
    comments: Tuple[CommentStyle, ...]
    bare: bool = True

    def comment_wrap(self, text: str) -> str:
        """
        Wrap text in the family's preferred comment

        Used for the one-line marker spliced in place of a missing include.

        Args:
            text: Comment body

        Returns:
            Text wrapped in the first comment style of the family
        """
        style = self.comments[0]
        if style.isBlock:
            return f"{style.open} {text} {style.close}"
        return f"{style.open} {text}"


@dataclass(frozen=True)
class Line:
    r"""
    A single source line and its original terminator

    Attributes:
        text: Line content without the terminator
        terminator: "\r\n", "\n", "\r", or "" for an unterminated last line
        number: 1-based line number in the file it came from

    Example:
        For source "a\r\nb":
        [Line("a", "\r\n", 1), Line("b", "", 2)]
    """
    text: str
    terminator: str = ""
    number: int = 0


@dataclass(frozen=True)
class DirectiveLine:
    """
    A line recognized as directive syntax

    Returned by Scanner.line_classify() when a line matches one of the
    family's comment styles and names a registered keyword.

    Attributes:
        keyword: Directive keyword without the "@" (e.g. "ifdef", "include")
        argument: Text after the keyword, stripped ("" when absent)
        indent: Leading whitespace of the line
        line: The originating Line record

    Example:
        For line "  // @include header.js":
        DirectiveLine(keyword="include", argument="header.js", indent="  ", line=...)
    """
    keyword: str
    argument: str
    indent: str
    line: Line
