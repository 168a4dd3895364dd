"""
Directive grammar tables

Maps the ``type`` option (and its aliases) to the comment family whose
delimiters wrap a directive line. Three families exist:

    html    <!-- @if DEBUG -->
    js      // @if DEBUG      /* @if DEBUG */
    coffee  # @if DEBUG

The file entry points derive ``type`` from the source file's extension, which
is looked up in the same alias table.
"""

from pathlib import Path
from typing import Dict, Tuple, Union

from ..models.scanner import CommentStyle, DirectiveSyntax
from .errors import UnsupportedTypeError


FAMILY_COMMENTS: Dict[str, Tuple[CommentStyle, ...]] = {
    'html': (CommentStyle('<!--', '-->'),),
    'js': (CommentStyle('/*', '*/'), CommentStyle('//')),
    'coffee': (CommentStyle('#'),),
}

TYPE_ALIASES: Dict[str, str] = {
    # html family
    'html': 'html',
    'htm': 'html',
    'xml': 'html',
    # C-like family
    'js': 'js',
    'javascript': 'js',
    'jsx': 'js',
    'c': 'js',
    'cc': 'js',
    'cpp': 'js',
    'h': 'js',
    'hpp': 'js',
    'cs': 'js',
    'csharp': 'js',
    'java': 'js',
    'less': 'js',
    'sass': 'js',
    'scss': 'js',
    'css': 'js',
    'php': 'js',
    'ts': 'js',
    'tsx': 'js',
    'peg': 'js',
    'pegjs': 'js',
    'jade': 'js',
    'styl': 'js',
    # shell-like family
    'coffee': 'coffee',
    'bash': 'coffee',
    'shell': 'coffee',
    'sh': 'coffee',
}

# Stylesheet languages whose own syntax has @if/@else/@include/@extend lines
NATIVE_AT_RULE_TYPES = frozenset({'less', 'sass', 'scss', 'styl'})


def family_resolve(type_name: str) -> str:
    """
    Resolve a type or alias to its canonical family name

    Args:
        type_name: Value of the type option (case-insensitive)

    Returns:
        "html", "js" or "coffee"

    Raises:
        UnsupportedTypeError: If the name is not in the alias table
    """
    family = TYPE_ALIASES.get((type_name or '').strip().lower())
    if family is None:
        raise UnsupportedTypeError(
            f"Unsupported type '{type_name}'. "
            f"Expected one of: {', '.join(sorted(TYPE_ALIASES))}"
        )
    return family


def syntax_select(type_name: str, bare: bool = True) -> DirectiveSyntax:
    """
    Build the DirectiveSyntax for a type option

    Args:
        type_name: Family name or alias
        bare: Allow directive lines without a comment wrapper; always off
              for stylesheet types that use @-rules natively

    Returns:
        Immutable DirectiveSyntax for the run

    Example:
        >>> syntax_select('ts').family
        'js'
    """
    family = family_resolve(type_name)
    allow_bare = bare and type_name.strip().lower() not in NATIVE_AT_RULE_TYPES
    return DirectiveSyntax(family=family, comments=FAMILY_COMMENTS[family], bare=allow_bare)


def type_fromPath(path: Union[str, Path]) -> str:
    """
    Derive the type option from a file extension

    Args:
        path: Source file path

    Returns:
        Lowercased extension without the dot (validated against the table)

    Raises:
        UnsupportedTypeError: If the file has no extension or an unknown one
    """
    extension = Path(path).suffix.lstrip('.').lower()
    if not extension:
        raise UnsupportedTypeError(
            f"Cannot derive a type from '{path}' (no file extension); pass the type option"
        )
    family_resolve(extension)
    return extension
