"""
Output assembler

Joins the surviving lines of the outermost file into the result string,
normalizing every terminator to a single EOL.
"""

from typing import Iterable, List

from ..models.scanner import Line


def lines_join(lines: Iterable[Line], eol: str) -> str:
    r"""
    Join lines with one EOL

    Lines that had a terminator get eol; an unterminated last line stays
    unterminated.

    Args:
        lines: Rendered lines, including spliced included content
        eol: "\r\n", "\n" or "\r"

    Returns:
        Final output string
    """
    return ''.join(line.text + (eol if line.terminator else '') for line in lines)


def lines_indent(lines: List[Line], indent: str) -> List[Line]:
    """Prefix every non-empty line with indent (used for spliced includes)"""
    if not indent:
        return lines
    return [
        Line(indent + line.text, line.terminator, line.number) if line.text else line
        for line in lines
    ]
