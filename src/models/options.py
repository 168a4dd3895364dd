"""
Per-call preprocessing options

Mirrors the options object accepted by preprocess() and the file variants.
Validated with pydantic so a bad srcEol or a misspelled option fails before
any scanning starts.
"""

from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PreprocessOptions(BaseModel):
    """
    Options for one preprocessing run.

    Field names keep the camelCase spelling of the public interface so a
    plain dict with the same keys can be passed anywhere options are taken.

    Examples:
        PreprocessOptions(type="js", srcEol="\\n")
        PreprocessOptions(**{"fileNotFoundSilentFail": True, "srcDir": "templates"})
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    fileNotFoundSilentFail: bool = Field(
        default=False,
        description="Splice a marker comment instead of raising when an included file is missing",
    )

    srcDir: Optional[Path] = Field(
        default=None,
        description="Directory @include/@extend paths are resolved against (default: cwd, "
        "or the source file's directory for the file variants)",
    )

    srcEol: Optional[Literal["\r\n", "\n", "\r"]] = Field(
        default=None,
        description="EOL of the result (default: dominant EOL of the source, else the platform EOL)",
    )

    type: Optional[str] = Field(
        default=None,
        description="Directive family or alias (default: setting for strings, file extension for files)",
    )


OptionsLike = Union[PreprocessOptions, Mapping[str, Any], None]


def options_coerce(options: OptionsLike) -> PreprocessOptions:
    """
    Accept a PreprocessOptions, a plain mapping, or None.

    Args:
        options: Options as given by the caller

    Returns:
        Validated PreprocessOptions instance

    Raises:
        pydantic.ValidationError: If a key is unknown or a value is invalid
    """
    if options is None:
        return PreprocessOptions()
    if isinstance(options, PreprocessOptions):
        return options
    return PreprocessOptions(**dict(options))
