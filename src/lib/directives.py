"""
Directive implementations for prepro

Each directive keyword maps to a DirectiveSpec whose handler applies the
directive to the file being rendered. Handlers receive the recognized
DirectiveLine and the per-file render pass (see resolver.RenderPass).
"""

from typing import Any, Dict, List, Optional

from ..models.directives import DirectiveSpec, DirectiveCategory
from ..models.scanner import DirectiveLine, Line
from .evaluator import condition_evaluate, echo_resolve, name_isDefined


class DirectiveRegistry:
    """
    Registry of directive specifications and handlers

    Maps directive keywords to DirectiveSpec objects containing metadata
    and rendering handlers. A keyword missing from the registry is not a
    directive: the scanner leaves such lines as literal text.
    """

    def __init__(self) -> None:
        """Initialize the directive registry and register all built-in directives"""
        self.specs: Dict[str, DirectiveSpec] = {}
        self.conditionalDirectives_register()
        self.inclusionDirectives_register()
        self.blockDirectives_register()
        self.substitutionDirectives_register()

    def register(self, spec: DirectiveSpec) -> None:
        """Register a directive specification"""
        self.specs[spec.name] = spec

    def spec_get(self, keyword: str) -> Optional[DirectiveSpec]:
        """Get full directive specification by keyword"""
        return self.specs.get(keyword)

    def directives_listByCategory(self, category: DirectiveCategory) -> List[DirectiveSpec]:
        """Get all directives in a category"""
        return [spec for spec in self.specs.values() if spec.category == category]

    def conditionalDirectives_register(self) -> None:
        """Register @if family and @exclude directives"""

        def if_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @if - push a frame for the expression's truth value"""
            number = directive.line.number
            condition = condition_evaluate(directive.argument, render.context, render.file, number)
            render.frames.push("if", condition, number)

        def ifdef_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @ifdef - true when the key exists, whatever its value"""
            render.frames.push("ifdef", name_isDefined(directive.argument, render.context), directive.line.number)

        def ifndef_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @ifndef - exact negation of @ifdef"""
            render.frames.push("ifndef", not name_isDefined(directive.argument, render.context), directive.line.number)

        def elif_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @elif"""
            number = directive.line.number
            condition = condition_evaluate(directive.argument, render.context, render.file, number)
            render.frames.branch_elif(condition, number)

        def else_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @else"""
            render.frames.branch_else(directive.line.number)

        def endif_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @endif"""
            render.frames.pop("endif", directive.line.number)

        def exclude_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @exclude - a block that is never emitted"""
            render.frames.push("exclude", False, directive.line.number)

        def endexclude_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @endexclude"""
            render.frames.pop("endexclude", directive.line.number, opener="exclude")

        conditionals = [
            ("if", if_handler, True, "Emit the block when the expression holds",
             ["// @if DEBUG", "<!-- @if ENV == 'production' -->"]),
            ("ifdef", ifdef_handler, True, "Emit the block when the key is in the context",
             ["# @ifdef API_KEY"]),
            ("ifndef", ifndef_handler, True, "Emit the block when the key is not in the context",
             ["// @ifndef LEGACY"]),
            ("elif", elif_handler, True, "Alternative branch tried when no earlier branch matched",
             ["// @elif ENV == 'staging'"]),
            ("else", else_handler, False, "Branch taken when no earlier branch matched",
             ["// @else"]),
            ("endif", endif_handler, False, "Close the innermost conditional",
             ["// @endif"]),
            ("exclude", exclude_handler, False, "Drop everything up to @endexclude",
             ["/* @exclude */"]),
            ("endexclude", endexclude_handler, False, "Close an @exclude block",
             ["/* @endexclude */"]),
        ]
        for name, handler, requires_argument, description, examples in conditionals:
            self.register(DirectiveSpec(
                name=name,
                category=DirectiveCategory.CONDITIONAL,
                description=description,
                handler=handler,
                requires_argument=requires_argument,
                runs_when_suppressed=True,
                examples=examples,
            ))

    def inclusionDirectives_register(self) -> None:
        """Register @include, @include-static and @extend"""

        def include_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @include - splice the preprocessed file"""
            render.include_splice(directive)

        def includeStatic_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @include-static - splice the file's raw text"""
            render.include_splice(directive)

        def extend_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @extend - render a template with this file's blocks"""
            render.extend_register(directive)

        self.register(DirectiveSpec(
            name="include",
            category=DirectiveCategory.INCLUSION,
            description="Preprocess a file relative to srcDir and splice it in place",
            handler=include_handler,
            requires_argument=True,
            examples=["<!-- @include header.html -->", "// @include lib/util_@echo TARGET.js"],
        ))
        self.register(DirectiveSpec(
            name="include-static",
            category=DirectiveCategory.INCLUSION,
            description="Splice a file relative to srcDir without preprocessing it",
            handler=includeStatic_handler,
            requires_argument=True,
            examples=["// @include-static vendor/lib.min.js"],
        ))
        self.register(DirectiveSpec(
            name="extend",
            category=DirectiveCategory.INCLUSION,
            description="Render a template, replacing its blocks with this file's blocks",
            handler=extend_handler,
            requires_argument=True,
            examples=["<!-- @extend layout.html -->"],
        ))

    def blockDirectives_register(self) -> None:
        """Register @block / @endblock"""

        def block_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @block - open a named, overridable region"""
            render.block_open(directive)

        def endblock_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @endblock"""
            render.block_close(directive)

        self.register(DirectiveSpec(
            name="block",
            category=DirectiveCategory.BLOCK,
            description="Open a named region an extending file may override",
            handler=block_handler,
            requires_argument=True,
            runs_when_suppressed=True,
            examples=["<!-- @block content -->"],
        ))
        self.register(DirectiveSpec(
            name="endblock",
            category=DirectiveCategory.BLOCK,
            description="Close the innermost @block",
            handler=endblock_handler,
            runs_when_suppressed=True,
            examples=["<!-- @endblock -->"],
        ))

    def substitutionDirectives_register(self) -> None:
        """Register @echo"""

        def echo_handler(directive: DirectiveLine, render: Any) -> None:
            """Handle @echo - replace the line with a context value"""
            value = echo_resolve(directive.argument, render.context)
            line = directive.line
            render.emit(Line(directive.indent + value, line.terminator, line.number))

        self.register(DirectiveSpec(
            name="echo",
            category=DirectiveCategory.SUBSTITUTION,
            description="Replace the line with a context value (missing keys give '')",
            handler=echo_handler,
            requires_argument=True,
            examples=["// @echo VERSION", "<title><!-- @echo TITLE --></title>"],
        ))


def directives_describe(registry: Optional[DirectiveRegistry] = None) -> str:
    """
    Directive reference grouped by category, as shown by --help

    Args:
        registry: Registry to describe (default: the built-in directives)

    Returns:
        One heading per category followed by one line per directive
    """
    registry = registry or DirectiveRegistry()
    sections = []
    for category in DirectiveCategory:
        lines = [f"{category.value} directives:"]
        lines += ["  " + spec.usage_format() for spec in registry.directives_listByCategory(category)]
        sections.append("\n".join(lines))
    return "\n\n".join(sections)
