"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the CLI pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as preprocessing progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, outputFile, type,
                   srcEol, fileNotFoundSilentFail, define, contextFile, environ
        - env_check: inputSourceFile, outputTargetFile, envOK
        - context_build: context
        - source_preprocess: preprocessResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the source file
        outputdir: Base output directory for preprocessed files
        verbosity: Logging verbosity level (1-3)
        inputFile: Source filename (relative to inputdir)
        outputFile: Output filename (relative to outputdir, default inputFile)
        type: Directive family or alias (default: from inputFile extension)
        srcEol: EOL name for the result ("crlf", "lf", "cr")
        fileNotFoundSilentFail: Mark missing includes instead of failing
        define: KEY=VALUE context assignments from the command line
        contextFile: Optional YAML file with context variables
        environ: Seed the context with the process environment
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the source file
        outputTargetFile: Resolved path to the output file
        context: Context mapping handed to the preprocessor
        preprocessResult: Results (output_file, line_count, status)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    outputFile: Optional[str] = field(default=None)
    type: Optional[str] = field(default=None)
    srcEol: Optional[str] = field(default=None)
    fileNotFoundSilentFail: bool = field(default=False)
    define: List[str] = field(default_factory=list)
    contextFile: Optional[str] = field(default=None)
    environ: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    outputTargetFile: Path = field(default=Path("/"))
    context: Optional[Dict[str, Any]] = field(default=None)
    preprocessResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the pipeline.

        Args:
            options: Parsed CLI arguments (inputFile, define, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for preprocessed output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Only keep options that are ProgramState fields
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}
        if filtered_options.get("define") is None:
            filtered_options.pop("define", None)

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            context_build,
            source_preprocess,
            results_report
        )

    This is equivalent to:
        results_report(source_preprocess(context_build(env_check(initial_state))))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
