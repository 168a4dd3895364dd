"""
Context evaluator

Resolves directive conditions and @echo substitutions against the context
mapping. The condition language is deliberately small:

    NAME              truthiness of the context value
    !NAME             negated truthiness
    NAME == literal   string equality after stringification
    NAME != literal   string inequality
    NAME = literal    same as ==

A literal is a quoted string ('x' or "x") or a bare word/number.
"""

import re
from typing import Any, Mapping, Optional, Pattern

from .errors import StructuralError


_COMPARISON: Pattern[str] = re.compile(
    r'''^(?P<name>[^\s=!'"]+)\s*(?P<operator>==|!=|=)\s*(?P<literal>"[^"]*"|'[^']*'|[^\s'"]+)$'''
)
_TRUTHINESS: Pattern[str] = re.compile(r'''^(?P<negate>!?)\s*(?P<name>[^\s=!'"]+)$''')
_ECHO_TOKEN: Pattern[str] = re.compile(r'@echo[ \t]+(?P<name>\w+)')


def value_stringify(value: Any) -> str:
    """
    Stringify a context value for output and comparison

    Booleans use their lowercase spelling, integral floats drop the
    fractional part, and None becomes the empty string.

    Args:
        value: Context value (str, int, float, bool or None)

    Returns:
        String form of the value

    Example:
        >>> value_stringify(True), value_stringify(2.0), value_stringify(None)
        ('true', '2', '')
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def value_isTruthy(value: Any) -> bool:
    """A value counts as set unless it is missing, False, zero or empty"""
    return bool(value)


def literal_unquote(literal: str) -> str:
    """Strip one pair of matching single or double quotes"""
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in ('"', "'"):
        return literal[1:-1]
    return literal


def condition_evaluate(
    expression: str,
    context: Mapping[str, Any],
    file: Optional[str] = None,
    line: Optional[int] = None,
) -> bool:
    """
    Evaluate an @if / @elif expression

    Args:
        expression: Directive argument
        context: Context mapping
        file: Current file, for error messages
        line: Current line number, for error messages

    Returns:
        Truth value of the expression

    Raises:
        StructuralError: If the expression is empty or malformed

    Example:
        >>> condition_evaluate("ENV == 'prod'", {"ENV": "prod"})
        True
        >>> condition_evaluate("!DEBUG", {"DEBUG": False})
        True
    """
    text = expression.strip()

    match = _COMPARISON.match(text)
    if match:
        actual = value_stringify(context.get(match.group('name')))
        expected = literal_unquote(match.group('literal'))
        if match.group('operator') == '!=':
            return actual != expected
        return actual == expected

    match = _TRUTHINESS.match(text)
    if match:
        result = value_isTruthy(context.get(match.group('name')))
        return not result if match.group('negate') else result

    raise StructuralError(f"Malformed condition '{expression}'", file, line)


def name_isDefined(name: str, context: Mapping[str, Any]) -> bool:
    """@ifdef test: key presence only, whatever the value"""
    return name in context


def echo_resolve(argument: str, context: Mapping[str, Any]) -> str:
    """
    Resolve the argument of an @echo directive

    A quoted argument echoes its literal text; otherwise the argument names a
    context key. Missing keys give an empty string.

    Args:
        argument: Text after @echo
        context: Context mapping

    Returns:
        Replacement text
    """
    argument = argument.strip()
    unquoted = literal_unquote(argument)
    if unquoted != argument:
        return unquoted
    return value_stringify(context.get(argument))


def echoTokens_substitute(text: str, context: Mapping[str, Any]) -> str:
    """
    Replace "@echo NAME" tokens embedded in a directive argument

    Used on include/extend paths, where the name ends at the first
    non-word character.

    Example:
        >>> echoTokens_substitute("header_@echo LANG.html", {"LANG": "en"})
        'header_en.html'
    """
    return _ECHO_TOKEN.sub(lambda match: value_stringify(context.get(match.group('name'))), text)
