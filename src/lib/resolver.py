"""
Include/extend resolver and per-file render pass

Runs the whole pipeline for one file:

    Scanner -> ConditionalStack (+ evaluator) -> directive handlers -> lines

and re-enters itself for @include / @extend targets. Everything a pass needs
(context, srcDir, the chain of files being resolved, block overrides) is
passed down explicitly, so concurrent runs share no state.

Included content is returned as Line records with their own terminators and
spliced into the parent's stream; the outermost run joins the result with a
single EOL (see assembler.lines_join).

Example:
    >>> preprocessor = Preprocessor(syntax_select('js'), PreprocessOptions())
    >>> preprocessor.run("// @if DEBUG\\nlog\\n// @endif\\n", {"DEBUG": True})
    'log\\n'
"""

import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import appsettings, AppSettings
from ..models.options import PreprocessOptions
from ..models.resolver import BlockFrame, BlockSlot, ExtendSlot, IncludeRequest, Segment
from ..models.scanner import DirectiveLine, DirectiveSyntax, Line
from .assembler import lines_indent, lines_join
from .conditional import ConditionalStack
from .directives import DirectiveRegistry
from .errors import (
    STRING_SOURCE,
    CircularIncludeError,
    EncodingError,
    IncludeNotFoundError,
    StructuralError,
)
from .evaluator import echoTokens_substitute, literal_unquote
from .log import LOG
from .scanner import Scanner, eol_detect, lines_split


def file_read(path: str) -> str:
    """Read a file as UTF-8 text, keeping its line endings untouched"""
    with open(path, 'r', encoding='utf-8', newline='') as handle:
        return handle.read()


class Preprocessor:
    """
    Directive engine for one top-level run

    Holds what stays constant across the recursion: the grammar, the
    options, the directive registry and the scanner built from them.
    """

    def __init__(
        self,
        syntax: DirectiveSyntax,
        options: PreprocessOptions,
        registry: Optional[DirectiveRegistry] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Args:
            syntax: Grammar selected from the type option
            options: Validated options for the run
            registry: DirectiveRegistry (a fresh one by default)
            settings: AppSettings (the module singleton by default)
        """
        self.syntax = syntax
        self.options = options
        self.settings = settings if settings is not None else appsettings
        self.registry = registry if registry is not None else DirectiveRegistry()
        self.scanner = Scanner(syntax, self.registry)

    def run(self, source: str, context: Mapping[str, Any], file: Optional[str] = None) -> str:
        """
        Preprocess a top-level source

        Args:
            source: Raw source text
            context: Context mapping (copied, never mutated)
            file: Path the source was read from, if any

        Returns:
            Output with every terminator normalized to the chosen EOL

        Raises:
            StructuralError, IncludeNotFoundError, CircularIncludeError
        """
        lines = lines_split(source)
        eol = self.options.srcEol or eol_detect(lines, self.settings.fallbackEol_get())
        src_dir = str(self.options.srcDir) if self.options.srcDir is not None else os.getcwd()
        chain: Tuple[str, ...] = (os.path.realpath(file),) if file else ()

        LOG(f"Preprocessing as {self.syntax.family} ({len(lines)} lines)", level=2, source=file or STRING_SOURCE)
        rendered = self.lines_render(lines, dict(context), src_dir, chain, file, {})
        return lines_join(rendered, eol)

    def lines_render(
        self,
        lines: List[Line],
        context: Mapping[str, Any],
        src_dir: str,
        chain: Tuple[str, ...],
        file: Optional[str],
        overrides: Mapping[str, List[Line]],
    ) -> List[Line]:
        """
        Render the lines of one file

        Args:
            lines: Lines of the file
            context: Context for this file ("src" already set for includes)
            src_dir: Directory relative include paths are resolved against
            chain: Resolved paths currently being processed, outermost first
            file: Path of the file, None for an in-memory source
            overrides: Block contents supplied by an extending file

        Returns:
            Surviving lines, included content spliced in
        """
        render = RenderPass(self, context, src_dir, chain, file, overrides)
        for line in lines:
            render.line_process(line)
        return render.finish()

    def request_build(self, directive: DirectiveLine, render: "RenderPass") -> IncludeRequest:
        """
        Resolve an include/extend argument into an IncludeRequest

        "@echo NAME" tokens in the argument are substituted first, then the
        path is joined to the current srcDir.
        """
        relative = literal_unquote(echoTokens_substitute(directive.argument, render.context).strip())
        path = os.path.normpath(os.path.join(render.src_dir, relative))
        return IncludeRequest(
            path=path,
            keyword=directive.keyword,
            includer=render.file,
            context={**render.context, 'src': path},
        )

    def target_render(
        self,
        directive: DirectiveLine,
        render: "RenderPass",
        overrides: Optional[Mapping[str, List[Line]]] = None,
    ) -> List[Line]:
        """
        Read and render the file named by an include/extend directive

        Args:
            directive: The @include / @include-static / @extend line
            render: Pass of the including file
            overrides: Blocks for the target (defaults to the includer's own)

        Returns:
            Rendered lines of the target (raw lines for @include-static), or
            a one-line marker when the file is missing and silent-fail is on

        Raises:
            CircularIncludeError: If the target is already being processed
            IncludeNotFoundError: If the target is missing and silent-fail is off
            EncodingError: If the target is not valid UTF-8
        """
        request = self.request_build(directive, render)
        number = directive.line.number
        key = os.path.realpath(request.path)
        static = request.keyword == 'include-static'
        # Raw text is never scanned, so a static splice cannot recurse
        if not static and key in render.chain:
            raise CircularIncludeError(render.chain + (key,), request.includer, number)

        LOG(f"Resolving @{request.keyword} {request.path}", level=2, source=request.includer)
        try:
            source = file_read(request.path)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            if not self.options.fileNotFoundSilentFail:
                raise IncludeNotFoundError(request.path, request.includer, number)
            LOG(f"Missing {request.path}, writing marker", level=1, source=request.includer)
            marker = self.syntax.comment_wrap(self.settings.missingMarker_make(request.path))
            return [Line(marker, directive.line.terminator, number)]
        except UnicodeDecodeError as e:
            raise EncodingError(request.path, e, request.includer, number) from e

        lines = lines_split(source)
        if static:
            return lines
        return self.lines_render(
            lines,
            request.context,
            os.path.dirname(request.path),
            render.chain + (key,),
            request.path,
            render.overrides if overrides is None else overrides,
        )


class RenderPass:
    """
    State of one file being rendered

    Owns the file's conditional stack, its open blocks, the blocks it has
    defined, and the output segments collected so far. Directive handlers
    (see directives.DirectiveRegistry) act on it.
    """

    def __init__(
        self,
        preprocessor: Preprocessor,
        context: Mapping[str, Any],
        src_dir: str,
        chain: Tuple[str, ...],
        file: Optional[str],
        overrides: Mapping[str, List[Line]],
    ) -> None:
        self.preprocessor = preprocessor
        self.scanner = preprocessor.scanner
        self.registry = preprocessor.registry
        self.context = context
        self.src_dir = src_dir
        self.chain = chain
        self.file = file or STRING_SOURCE
        self.overrides = overrides
        self.frames = ConditionalStack(self.file)
        self.segments: List[Segment] = []
        self.blocks: List[BlockFrame] = []
        self.defined: Dict[str, List[Segment]] = {}
        self.extended = False

    @property
    def emitting(self) -> bool:
        """Lines are emitted when every conditional allows it and no open block is overridden"""
        if not self.frames.emitting:
            return False
        return not any(block.overridden for block in self.blocks)

    def emit(self, segment: Segment) -> None:
        """Append to the innermost open block, or to the file output"""
        if self.blocks:
            self.blocks[-1].content.append(segment)
        else:
            self.segments.append(segment)

    def line_process(self, line: Line) -> None:
        """
        Apply one line to the pass

        Literal lines are emitted (with inline @echo substituted) when the
        pass is emitting. Directive lines are never emitted themselves; their
        handler runs when emitting, or always for directives that keep the
        nesting balanced.
        """
        directive = self.scanner.line_classify(line)
        if directive is None:
            if self.emitting:
                text = self.scanner.inlineEcho_substitute(line.text, self.context)
                self.emit(Line(text, line.terminator, line.number))
            return

        spec = self.registry.spec_get(directive.keyword)
        if not (self.emitting or spec.runs_when_suppressed):
            return
        if spec.requires_argument and not directive.argument:
            raise StructuralError(f"@{directive.keyword} requires an argument", self.file, line.number)

        LOG(f"line {line.number}: @{directive.keyword} {directive.argument}", level=3, source=self.file)
        spec.handler(directive, self)

    def lines_fit(self, lines: List[Line], directive: DirectiveLine) -> List[Line]:
        """
        Prepare rendered lines for splicing at a directive's position

        Every line takes the directive's indentation, and the last line ends
        with the directive line's own terminator.
        """
        if not lines:
            return []
        fitted = list(lines_indent(lines, directive.indent))
        last = fitted[-1]
        fitted[-1] = Line(last.text, directive.line.terminator, last.number)
        return fitted

    def include_splice(self, directive: DirectiveLine) -> None:
        """Render an @include / @include-static target and splice it here"""
        for line in self.lines_fit(self.preprocessor.target_render(directive, self), directive):
            self.emit(line)

    def extend_register(self, directive: DirectiveLine) -> None:
        """Mark the position of an @extend; the template renders in finish()"""
        if self.blocks:
            raise StructuralError(
                f"@extend inside @block {self.blocks[-1].name}", self.file, directive.line.number
            )
        self.extended = True
        self.emit(ExtendSlot(directive))

    def block_open(self, directive: DirectiveLine) -> None:
        """Open a @block; its default content is dropped when overridden"""
        active = self.emitting
        name = directive.argument
        self.blocks.append(
            BlockFrame(
                name=name,
                line_number=directive.line.number,
                active=active,
                overridden=active and name in self.overrides,
            )
        )

    def block_close(self, directive: DirectiveLine) -> None:
        """Close the innermost @block and leave a slot for it in the output"""
        if not self.blocks:
            raise StructuralError("@endblock without a matching @block", self.file, directive.line.number)
        block = self.blocks.pop()
        if not block.active:
            return
        content: List[Segment] = list(self.overrides[block.name]) if block.overridden else block.content
        self.defined[block.name] = content
        self.emit(BlockSlot(block.name, content))

    def segments_flatten(self, segments: List[Segment]) -> List[Line]:
        """Expand block slots in place"""
        lines: List[Line] = []
        for segment in segments:
            if isinstance(segment, BlockSlot):
                lines.extend(self.segments_flatten(segment.content))
            elif isinstance(segment, Line):
                lines.append(segment)
        return lines

    def finish(self) -> List[Line]:
        """
        Close the pass and produce its lines

        Without @extend, blocks render in place. With @extend, block content
        is handed to the template(s) instead and each template is spliced at
        its directive's position.

        Raises:
            StructuralError: If a conditional or block is left open
        """
        self.frames.finish()
        if self.blocks:
            block = self.blocks[-1]
            raise StructuralError(
                f"Unterminated @block {block.name} opened at line {block.line_number}",
                self.file,
                block.line_number,
            )

        if not self.extended:
            return self.segments_flatten(self.segments)

        blocks: Dict[str, List[Line]] = dict(self.overrides)
        for name, content in self.defined.items():
            blocks[name] = self.segments_flatten(content)

        lines: List[Line] = []
        for segment in self.segments:
            if isinstance(segment, Line):
                lines.append(segment)
            elif isinstance(segment, ExtendSlot):
                rendered = self.preprocessor.target_render(segment.directive, self, overrides=blocks)
                lines.extend(self.lines_fit(rendered, segment.directive))
        return lines
