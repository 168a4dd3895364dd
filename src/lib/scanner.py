"""
Line scanner for directive syntax

Splits a source into Line records that keep their original terminators,
detects the dominant EOL, and classifies each line as a directive or literal
text for the selected comment family.

A line is a directive line when, ignoring surrounding blanks, it is exactly:

    <comment-open> @keyword [argument] <comment-close>

for a registered keyword, e.g. "<!-- @ifdef DEBUG -->" or "// @include a.js".
Anything else, including "@unknown" inside a comment, stays literal.

Example:
    >>> scanner = Scanner(syntax_select('js'))
    >>> scanner.line_classify(Line("  // @include header.js", "\\n", 1)).argument
    'header.js'
"""

import re
from collections import Counter
from typing import List, Optional, Pattern, Tuple

from ..models.scanner import CommentStyle, DirectiveLine, DirectiveSyntax, Line
from .directives import DirectiveRegistry
from .evaluator import echo_resolve


_EOL_SPLIT: Pattern[str] = re.compile(r'(\r\n|\r|\n)')

BARE_STYLE = CommentStyle('')


def lines_split(source: str) -> List[Line]:
    r"""
    Split source into lines, keeping each line's terminator

    Only CRLF, LF and CR end a line. A terminator at the very end of the
    source does not produce an extra empty line.

    Args:
        source: Raw source text

    Returns:
        Ordered list of Line records

    Example:
        >>> [(line.text, line.terminator) for line in lines_split("a\r\nb\nc")]
        [('a', '\r\n'), ('b', '\n'), ('c', '')]
    """
    parts = _EOL_SPLIT.split(source)
    lines: List[Line] = []
    # parts alternates text, terminator, text, ..., text
    for index in range(0, len(parts) - 1, 2):
        lines.append(Line(parts[index], parts[index + 1], len(lines) + 1))
    if parts[-1]:
        lines.append(Line(parts[-1], '', len(lines) + 1))
    return lines


def eol_detect(lines: List[Line], fallback: str) -> str:
    """
    Pick the dominant line ending by majority vote

    Args:
        lines: Lines produced by lines_split()
        fallback: EOL returned when no terminator strictly dominates

    Returns:
        "\\r\\n", "\\n", "\\r", or fallback
    """
    votes = Counter(line.terminator for line in lines if line.terminator)
    ranked = votes.most_common(2)
    if not ranked:
        return fallback
    if len(ranked) == 2 and ranked[0][1] == ranked[1][1]:
        return fallback
    return ranked[0][0]


def directivePattern_build(style: CommentStyle) -> Pattern[str]:
    """
    Compile the whole-line directive pattern for one comment style

    Groups: indent, keyword, argument (optional).

    Args:
        style: Comment delimiters (open only for line comments)

    Returns:
        Compiled regular expression anchored at both ends of the line
    """
    head = r'^(?P<indent>[ \t]*)' + re.escape(style.open) + r'[ \t]*@(?P<keyword>[A-Za-z][\w-]*)'
    if style.isBlock:
        close = re.escape(style.close)
        # The argument may not contain the close token, so "<!-- a --> x <!-- b -->" stays literal
        argument = r'(?:[ \t]+(?P<argument>(?:(?!' + close + r').)*?))?[ \t]*'
        tail = close + r'[ \t]*$'
    else:
        argument = r'(?:[ \t]+(?P<argument>.*?))?[ \t]*'
        tail = '$'
    return re.compile(head + argument + tail)


def inlineEchoPattern_build(style: CommentStyle) -> Pattern[str]:
    """Compile the pattern for an @echo wrapped in a block comment inside a line"""
    return re.compile(
        re.escape(style.open)
        + r'[ \t]*@echo[ \t]+(?P<argument>.*?)[ \t]*'
        + re.escape(style.close)
    )


class Scanner:
    """
    Classifies lines for one DirectiveSyntax

    Handles:
    - Directive lines in every comment style of the family
    - Bare directive lines (no comment wrapper) when the syntax allows them
    - Inline /* @echo NAME */ and <!-- @echo NAME --> in literal lines
    """

    def __init__(self, syntax: DirectiveSyntax, registry: Optional[DirectiveRegistry] = None):
        """
        Initialize scanner for a comment family

        Args:
            syntax: Grammar selected for the run
            registry: DirectiveRegistry used to recognize keywords
        """
        self.syntax = syntax
        self.registry = registry if registry is not None else DirectiveRegistry()

        styles: List[CommentStyle] = list(syntax.comments)
        if syntax.bare:
            styles.append(BARE_STYLE)
        self.directive_patterns: Tuple[Pattern[str], ...] = tuple(
            directivePattern_build(style) for style in styles
        )
        self.echo_patterns: Tuple[Pattern[str], ...] = tuple(
            inlineEchoPattern_build(style) for style in syntax.comments if style.isBlock
        )

    def line_classify(self, line: Line) -> Optional[DirectiveLine]:
        """
        Classify a line as directive or literal

        Args:
            line: Line to inspect

        Returns:
            DirectiveLine if the line is directive syntax with a registered
            keyword, None for literal lines
        """
        for pattern in self.directive_patterns:
            match = pattern.match(line.text)
            if not match:
                continue
            keyword = match.group('keyword')
            if self.registry.spec_get(keyword) is None:
                # Looks like a directive but names none: leave it as text
                return None
            return DirectiveLine(
                keyword=keyword,
                argument=(match.group('argument') or '').strip(),
                indent=match.group('indent'),
                line=line,
            )
        return None

    def inlineEcho_substitute(self, text: str, context) -> str:
        """
        Replace block-comment @echo placeholders inside a literal line

        Args:
            text: Literal line text
            context: Context mapping

        Returns:
            Text with every inline echo replaced by its value

        Example:
            'var v = "/* @echo VERSION */";' -> 'var v = "1.2";'
        """
        for pattern in self.echo_patterns:
            if '@echo' not in text:
                break
            text = pattern.sub(lambda match: echo_resolve(match.group('argument'), context), text)
        return text
