"""
Public entry points

    preprocess(source, context=None, options=None) -> str
    await preprocessFile(srcPath, destPath, context=None, options=None)
    preprocessFileSync(srcPath, destPath, context=None, options=None)

When no context is given, a snapshot of the process environment is used.
The file variants default srcDir to the source file's directory and type to
its extension, expose the source path as "src" in the context, and only
replace the destination once the whole result is known.

Example:
    >>> preprocess("@if DEBUG\\nlog\\n@else\\nno-log\\n@endif\\n", {"DEBUG": True}, {"type": "js"})
    'log\\n'
"""

import asyncio
import os
import stat
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..config import appsettings
from ..models.options import OptionsLike, PreprocessOptions, options_coerce
from .errors import EncodingError
from .grammar import syntax_select, type_fromPath
from .log import LOG
from .resolver import Preprocessor, file_read


PathLike = Union[str, Path]


def context_default(context: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Copy the caller's context, or snapshot os.environ when none is given"""
    if context is None:
        return dict(os.environ)
    return dict(context)


def source_preprocess(
    source: str,
    context: Mapping[str, Any],
    options: PreprocessOptions,
    file: Optional[str] = None,
) -> str:
    """
    Run one preprocessing pass with validated options

    Args:
        source: Raw source text
        context: Context mapping
        options: Validated options
        file: Path the source came from, if any

    Returns:
        Preprocessed text

    Raises:
        UnsupportedTypeError: Before any scanning, for an unknown type
    """
    syntax = syntax_select(options.type or appsettings.default_type, bare=appsettings.bare_directives)
    return Preprocessor(syntax, options).run(source, context, file)


def preprocess(
    source: str,
    context: Optional[Mapping[str, Any]] = None,
    options: OptionsLike = None,
) -> str:
    """
    Preprocess a source string

    Args:
        source: The source to preprocess
        context: Variables used by the directives (default: os.environ)
        options: PreprocessOptions or a dict with the same keys

    Returns:
        The preprocessed source

    Raises:
        StructuralError: Unbalanced or malformed directives
        IncludeNotFoundError: Missing include without fileNotFoundSilentFail
        CircularIncludeError: A file includes itself
        UnsupportedTypeError: Unknown type option
        EncodingError: An included file is not valid UTF-8
    """
    return source_preprocess(source, context_default(context), options_coerce(options))


def fileOptions_resolve(srcPath: PathLike, options: OptionsLike) -> PreprocessOptions:
    """Fill in the file-variant defaults: srcDir from the path, type from the extension"""
    resolved = options_coerce(options)
    updates: Dict[str, Any] = {}
    if resolved.srcDir is None:
        updates['srcDir'] = Path(srcPath).parent
    if resolved.type is None:
        updates['type'] = type_fromPath(srcPath)
    return resolved.model_copy(update=updates) if updates else resolved


_umask_lock = threading.Lock()


def fileMode_resolve(destination: Path) -> int:
    """
    Permission bits the written file should carry

    An existing destination keeps its mode; a new file gets the mode a plain
    open() would give it (0o666 less the process umask).
    """
    try:
        return stat.S_IMODE(destination.stat().st_mode)
    except FileNotFoundError:
        pass
    # os.umask() can only be read by setting it
    with _umask_lock:
        umask = os.umask(0o022)
        os.umask(umask)
    return 0o666 & ~umask


def file_writeAtomic(destPath: PathLike, text: str) -> None:
    """
    Write text to destPath through a temporary sibling file

    The destination is replaced in one rename, so readers never see a
    partially written file and a failed write leaves the old file intact.
    The temporary file is created owner-only, so it is given the
    destination's permissions before the rename.
    """
    destination = Path(destPath)
    destination.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        'w',
        encoding='utf-8',
        newline='',
        dir=destination.parent,
        prefix=f".{destination.name}.",
        suffix='.tmp',
        delete=False,
    )
    try:
        with handle:
            handle.write(text)
        os.chmod(handle.name, fileMode_resolve(destination))
        os.replace(handle.name, destination)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise


def preprocessFileSync(
    srcPath: PathLike,
    destPath: PathLike,
    context: Optional[Mapping[str, Any]] = None,
    options: OptionsLike = None,
) -> None:
    """
    Preprocess srcPath and save the result to destPath

    Args:
        srcPath: Path to the source file
        destPath: Path the result is written to
        context: See preprocess(); "src" is set to srcPath
        options: See preprocess(); srcDir defaults to srcPath's directory and
                 type to srcPath's extension

    Raises:
        OSError: If the source cannot be read or the result cannot be written
        PreprocessError: Any preprocessing failure (destPath is left untouched)
    """
    resolved = fileOptions_resolve(srcPath, options)
    merged = context_default(context)
    merged['src'] = str(srcPath)

    try:
        source = file_read(str(srcPath))
    except UnicodeDecodeError as e:
        raise EncodingError(str(srcPath), e) from e
    result = source_preprocess(source, merged, resolved, file=str(srcPath))
    file_writeAtomic(destPath, result)
    LOG(f"Wrote {destPath} ({len(result)} characters)", level=2)


async def preprocessFile(
    srcPath: PathLike,
    destPath: PathLike,
    context: Optional[Mapping[str, Any]] = None,
    options: OptionsLike = None,
) -> None:
    """
    Asynchronous variant of preprocessFileSync()

    The pass runs in a worker thread, so output order is exactly that of the
    synchronous variant. Errors are raised from the awaited coroutine.
    """
    await asyncio.to_thread(preprocessFileSync, srcPath, destPath, context, options)
