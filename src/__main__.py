#!/usr/bin/env python3
"""
prepro - Directive-based text preprocessor

Preprocesses one source file from an input directory into an output
directory, resolving conditional blocks, includes/extends and @echo
substitutions against a context built from the command line.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Comment-wrapped directives: sources stay valid HTML/JS/shell before processing
    - Explicit context: variables come from --define, a YAML file, or the environment
    - Safe output: the destination is only replaced by a complete result

Usage:
    prepro inputdir/ outputdir/ --inputFile index.html --define ENV=production

Examples:
    # Basic preprocessing (type from the file extension)
    prepro src/ dist/ --inputFile app.js --define DEBUG=true

    # Context from YAML, Unix line endings, missing includes marked not fatal
    prepro src/ dist/ --inputFile index.html --contextFile vars.yaml --srcEol lf --fileNotFoundSilentFail

    # Verbose output
    prepro src/ dist/ --inputFile index.html -vv
"""

import os
import sys
from pathlib import Path
from argparse import (
    ArgumentParser,
    Namespace,
    ArgumentDefaultsHelpFormatter,
    RawDescriptionHelpFormatter,
)
from typing import Any, Dict

import yaml
from chris_plugin import chris_plugin

from .config import appsettings
from .lib import preprocessFileSync, PreprocessError, __version__, LOG, state_connectToLogger
from .lib.directives import directives_describe
from .models import ProgramState, pipeline
from .models.directives import reserved_is


DISPLAY_TITLE = r"""
   _ __  _ __ ___ _ __  _ __ ___
  | '_ \| '__/ _ \ '_ \| '__/ _ \
  | |_) | | |  __/ |_) | | | (_) |
  | .__/|_|  \___| .__/|_|  \___/
  |_|            |_|

  Directive-based text preprocessor
"""

EOL_NAMES: Dict[str, str] = {"crlf": "\r\n", "lf": "\n", "cr": "\r"}


class HelpFormatter(ArgumentDefaultsHelpFormatter, RawDescriptionHelpFormatter):
    """Show option defaults and keep the directive reference laid out as written"""
    pass


# Define CLI arguments
parser = ArgumentParser(
    description="prepro - Directive-based text preprocessor",
    epilog=directives_describe(),
    formatter_class=HelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Source file to preprocess (relative to inputdir)"
)

parser.add_argument(
    "--outputFile",
    default=None,
    type=str,
    help="Output file (relative to outputdir). Defaults to the inputFile name",
)

parser.add_argument(
    "--type",
    default=None,
    type=str,
    help="Directive family or alias (html, js, coffee, css, sh, ...). Defaults to the file extension",
)

parser.add_argument(
    "--srcEol",
    default=None,
    choices=sorted(EOL_NAMES),
    help="Line ending of the result. Defaults to the dominant line ending of the source",
)

parser.add_argument(
    "--fileNotFoundSilentFail",
    action="store_true",
    default=False,
    help="Write a marker comment instead of failing when an included file is missing",
)

parser.add_argument(
    "--define",
    action="append",
    default=None,
    metavar="KEY=VALUE",
    help="Context variable (repeatable). A bare KEY is defined as true",
)

parser.add_argument(
    "--contextFile",
    default=None,
    type=str,
    help="YAML file with a mapping of context variables (relative to inputdir)",
)

parser.add_argument(
    "--environ",
    action="store_true",
    default=False,
    help="Seed the context with the process environment",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the source file
            - outputTargetFile: Path the result will be written to
            - envOK: True if environment is valid

    Exits:
        1 if the input file is missing
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.is_file():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    state.outputTargetFile = state.outputdir / (state.outputFile or state.inputFile)
    LOG(f"Output file: {state.outputTargetFile}", level=2)

    state.envOK = True
    return state


def define_parse(assignment: str) -> tuple:
    """
    Split a --define argument into key and value.

    Args:
        assignment: "KEY=VALUE" or a bare "KEY"

    Returns:
        (key, value) where a bare KEY maps to True

    Example:
        >>> define_parse("ENV=production")
        ('ENV', 'production')
        >>> define_parse("DEBUG")
        ('DEBUG', True)
    """
    key, separator, value = assignment.partition("=")
    key = key.strip()
    if not separator:
        return key, True
    return key, value


def context_build(inputstate: ProgramState) -> ProgramState:
    """
    Assemble the preprocessing context.

    Precedence (lowest to highest): process environment (--environ),
    --contextFile YAML mapping, --define assignments.

    Args:
        inputstate: Program state after env_check

    Returns:
        ProgramState with added field:
            - context: Dict of context variables

    Exits:
        1 if the context file is unreadable or not a mapping, or a define is invalid
    """
    state = inputstate.copy()
    context: Dict[str, Any] = {}

    if state.environ:
        context.update(os.environ)
        LOG(f"Seeded context with {len(os.environ)} environment variables", level=2)

    if state.contextFile:
        context_path = state.inputdir / state.contextFile
        try:
            with open(context_path, "r", encoding="utf-8") as f:
                loaded: Any = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"Error reading context file: {e}", file=sys.stderr)
            sys.exit(1)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            print(f"Error: Context file must hold a mapping: {context_path}", file=sys.stderr)
            sys.exit(1)
        context.update({str(k): v for k, v in loaded.items()})
        LOG(f"Loaded {len(loaded)} variables from {context_path}", level=2)

    for assignment in state.define or []:
        key, value = define_parse(assignment)
        if not key:
            print(f"Error: Invalid --define '{assignment}'", file=sys.stderr)
            sys.exit(1)
        if reserved_is(key):
            print(f"Error: '{key}' is reserved and set by the preprocessor", file=sys.stderr)
            sys.exit(1)
        context[key] = value

    LOG(f"Context holds {len(context)} variables", level=3)
    state.context = context
    return state


def source_preprocess(inputstate: ProgramState) -> ProgramState:
    """
    Preprocess the source file into the output file.

    Args:
        inputstate: Program state with paths and context

    Returns:
        ProgramState with added field:
            - preprocessResult: Dict containing:
                - status: bool
                - output_file: str
                - line_count: int (lines in the result)

    Exits:
        1 if reading, preprocessing, or writing fails
    """

    state = inputstate.copy()

    LOG("Preprocessing source...", level=1)

    options: Dict[str, Any] = {"fileNotFoundSilentFail": state.fileNotFoundSilentFail}
    if state.type:
        options["type"] = state.type
    if state.srcEol:
        options["srcEol"] = EOL_NAMES[state.srcEol]

    try:
        preprocessFileSync(state.inputSourceFile, state.outputTargetFile, state.context or {}, options)
    except (PreprocessError, OSError) as e:
        print(f"Preprocessing error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    output = state.outputTargetFile.read_text(encoding="utf-8")
    state.preprocessResult = {
        "status": True,
        "output_file": str(state.outputTargetFile),
        "line_count": len(output.splitlines()),
    }
    LOG(f"Preprocessing complete: {state.preprocessResult['line_count']} lines", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display preprocessing results to the user.

    Args:
        inputstate: Program state with preprocessResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if preprocessResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.preprocessResult:
        print("Error: Preprocessing failed", file=sys.stderr)
        sys.exit(1)

    if state.verbosity >= 1:
        LOG("✓ Preprocessing successful!", level=1)
        LOG(f"  Output: {state.preprocessResult['output_file']}", level=1)
        LOG(f"  Lines:  {state.preprocessResult['line_count']}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="prepro - Directive-based text preprocessor",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - preprocess one source file into outputdir.

    Orchestrates the full pipeline:
        1. env_check: Validate paths
        2. context_build: Merge environment, YAML and --define variables
        3. source_preprocess: Run the preprocessor and write the result
        4. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the source file
        outputdir: Directory where the result will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    if appsettings.debug_mode:
        state.verbosity = max(state.verbosity, 3)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, context_build, source_preprocess, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
