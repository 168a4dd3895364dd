"""
Centralized logging using Loguru with context-aware verbosity.

LOG() respects the verbosity of the ProgramState connected to the current
context, so the engine modules can trace their work without having the CLI
state passed down to them. When prepro is used as a library no state is
connected and LOG() stays silent.

Verbosity levels map onto loguru levels:
    1 -> INFO     progress of the CLI pipeline
    2 -> DEBUG    files read, include/extend resolution
    3 -> TRACE    one line per directive and conditional transition

Usage:
    from prepro.lib.log import LOG, state_connectToLogger

    state_connectToLogger(state)
    LOG("Preprocessing source...", level=1)
    LOG(f"Resolving @include {path}", level=2, source=includer)
"""

from loguru import logger
from typing import Any, Dict, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

LEVEL_NAMES: Dict[int, str] = {1: "INFO", 2: "DEBUG", 3: "TRACE"}

# Configure loguru with prepro-specific format; "source" is the file being preprocessed
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<magenta>{extra[source]}</magenta> "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.configure(extra={"source": "-"})
logger.add(sys.stderr, format=logger_format, level="TRACE")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this at the start of the pipeline to make the state's verbosity
    setting available to LOG() calls in every module it reaches.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, source: Optional[str] = None, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=trace)
        source: File the message is about (shown before the message)
        **kwargs: Additional loguru metadata
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        bound = logger.bind(source=source) if source else logger
        bound.opt(depth=1).log(LEVEL_NAMES.get(level, "TRACE"), message, **kwargs)
