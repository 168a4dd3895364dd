"""
Error hierarchy for prepro

Every failure the engine raises derives from PreprocessError and names the
file and line it was found at, when known.
"""

from typing import Optional, Sequence


STRING_SOURCE = "<string>"


class PreprocessError(Exception):
    """Base class for all preprocessing failures"""

    def __init__(self, message: str, file: Optional[str] = None, line: Optional[int] = None):
        self.message = message
        self.file = file
        self.line = line
        super().__init__(self.text_format())

    def text_format(self) -> str:
        """
        Render the message with its location

        Returns:
            "message (file, line N)", shortened when file or line is unknown
        """
        if self.file is None and self.line is None:
            return self.message
        where = self.file or STRING_SOURCE
        if self.line is not None:
            where = f"{where}, line {self.line}"
        return f"{self.message} ({where})"


class StructuralError(PreprocessError):
    """Unbalanced or unterminated conditional/block, or a malformed directive argument"""
    pass


class IncludeNotFoundError(PreprocessError, FileNotFoundError):
    """An @include or @extend target does not exist"""

    def __init__(self, path: str, includer: str, line: Optional[int] = None):
        self.path = path
        self.includer = includer
        super().__init__(f'Included file "{path}" could not be found', includer, line)


class EncodingError(PreprocessError):
    """A source or included file is not valid UTF-8"""

    def __init__(
        self,
        path: str,
        error: UnicodeDecodeError,
        includer: Optional[str] = None,
        line: Optional[int] = None,
    ):
        self.path = path
        super().__init__(
            f'File "{path}" is not valid UTF-8 (byte {error.start}: {error.reason})',
            includer if includer is not None else path,
            line,
        )


class CircularIncludeError(PreprocessError):
    """A file includes itself, directly or transitively"""

    def __init__(self, chain: Sequence[str], file: Optional[str] = None, line: Optional[int] = None):
        self.chain = tuple(chain)
        super().__init__("Circular include: " + " -> ".join(self.chain), file, line)


class UnsupportedTypeError(PreprocessError, ValueError):
    """The type option, alias, or file extension names no directive family"""
    pass
