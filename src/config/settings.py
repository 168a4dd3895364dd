"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use PREPRO_ prefix (e.g., PREPRO_DEFAULT_TYPE=js).

Settings can also be loaded from a .env file in the project root.
"""

import os
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use PREPRO_ prefix.

    Examples:
        PREPRO_DEFAULT_TYPE=js
        PREPRO_BARE_DIRECTIVES=false
        PREPRO_DEFAULT_EOL="\\n"
    """

    model_config = SettingsConfigDict(
        env_prefix="PREPRO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Scanner configuration
    default_type: str = Field(
        default="html",
        description="Directive family used by preprocess() when no type option is given",
    )

    bare_directives: bool = Field(
        default=True,
        description="Recognize directive lines that carry no comment wrapper (e.g. '@if DEBUG')",
    )

    # Output configuration
    default_eol: Optional[str] = Field(
        default=None,
        description="EOL used when the source has no dominant line ending (None: os.linesep)",
    )

    missing_file_message: str = Field(
        default='The file "{path}" could not be found.',
        description="Marker text spliced in place of a missing include when silent-fail is on",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during preprocessing",
    )

    @field_validator("default_eol")
    @classmethod
    def eol_check(cls, value: Optional[str]) -> Optional[str]:
        """Only the three conventional line endings are accepted"""
        if value is not None and value not in ("\r\n", "\n", "\r"):
            raise ValueError(f"default_eol must be one of CRLF, LF or CR, not {value!r}")
        return value

    def fallbackEol_get(self) -> str:
        """
        Line ending used when a source has no dominant EOL.

        Returns:
            The configured default_eol, or the platform line separator

        Example:
            >>> AppSettings(default_eol="\\n").fallbackEol_get()
            '\\n'
        """
        return self.default_eol if self.default_eol is not None else os.linesep

    def missingMarker_make(self, path: str) -> str:
        """
        Build the human-readable text reported for a missing include.

        Args:
            path: Path of the file that could not be read

        Returns:
            Marker text (not yet wrapped in a comment)
        """
        return self.missing_file_message.format(path=path)


# Singleton instance - import this in your code
appsettings = AppSettings()
