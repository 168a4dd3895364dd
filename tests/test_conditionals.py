"""
Conditional tests - @if/@ifdef/@ifndef/@elif/@else/@endif and @exclude

Includes tests for nesting, branch exclusivity and structural errors.
"""

import pytest

from prepro.lib.api import preprocess
from prepro.lib.conditional import ConditionalStack
from prepro.lib.errors import StructuralError
from prepro.lib.evaluator import condition_evaluate


def run(source, context, **options):
    """Preprocess a js-family source with LF output"""
    return preprocess(source, context, {"type": "js", "srcEol": "\n", **options})


class TestIfElse:
    """Test the basic @if / @else / @endif form"""

    def test_bare_if_true(self):
        """Bare directive lines, truthy condition"""
        source = "@if DEBUG\nlog\n@else\nno-log\n@endif\n"

        assert run(source, {"DEBUG": True}) == "log\n"

    def test_bare_if_false(self):
        """Bare directive lines, falsy condition"""
        source = "@if DEBUG\nlog\n@else\nno-log\n@endif\n"

        assert run(source, {"DEBUG": False}) == "no-log\n"

    def test_comment_wrapped(self):
        """Line comment directives"""
        source = "start\n// @if DEBUG\nlog\n// @endif\nend\n"

        assert run(source, {"DEBUG": 1}) == "start\nlog\nend\n"
        assert run(source, {}) == "start\nend\n"

    def test_block_comment_wrapped(self):
        """Block comment directives"""
        source = "/* @if DEBUG */\nlog\n/* @endif */\n"

        assert run(source, {"DEBUG": "yes"}) == "log\n"

    def test_html_family(self):
        """HTML comment directives"""
        source = "<p>\n<!-- @if USER -->\nhello\n<!-- @endif -->\n</p>\n"

        assert preprocess(source, {"USER": "ann"}, {"type": "html", "srcEol": "\n"}) == "<p>\nhello\n</p>\n"

    def test_shell_family(self):
        """Shell comment directives"""
        source = "# @if VERBOSE\nset -x\n# @endif\necho done\n"

        assert preprocess(source, {}, {"type": "sh", "srcEol": "\n"}) == "echo done\n"

    @pytest.mark.parametrize("value", [None, False, 0, ""])
    def test_falsy_values(self, value):
        """Missing, False, zero and empty values all suppress the block"""
        assert run("// @if FLAG\nx\n// @endif\n", {"FLAG": value}) == ""

    def test_string_false_is_truthy(self):
        """Only the value's truthiness counts, not its spelling"""
        assert run("// @if FLAG\nx\n// @endif\n", {"FLAG": "false"}) == "x\n"

    def test_negation(self):
        """!NAME negates truthiness"""
        source = "// @if !DEBUG\nrelease\n// @endif\n"

        assert run(source, {"DEBUG": False}) == "release\n"
        assert run(source, {}) == "release\n"
        assert run(source, {"DEBUG": True}) == ""

    def test_directive_lines_never_emitted(self):
        """No directive line survives in the output"""
        source = "// @if A\n// @else\n// @endif\n"

        assert run(source, {"A": True}) == ""
        assert run(source, {}) == ""

    def test_indented_directives(self):
        """Indentation before the comment is allowed"""
        source = "function f() {\n    // @if DEBUG\n    log();\n    // @endif\n}\n"

        assert run(source, {}) == "function f() {\n}\n"


class TestComparisons:
    """Test == / != / = expressions"""

    def test_equality_quoted(self):
        """Quoted literal"""
        source = "// @if ENV == 'production'\nprod\n// @endif\n"

        assert run(source, {"ENV": "production"}) == "prod\n"
        assert run(source, {"ENV": "dev"}) == ""

    def test_equality_double_quoted(self):
        """Double quoted literal with spaces"""
        source = '// @if NAME == "a b"\nhit\n// @endif\n'

        assert run(source, {"NAME": "a b"}) == "hit\n"

    def test_inequality(self):
        """!= operator"""
        source = "// @if ENV != production\ndev\n// @endif\n"

        assert run(source, {"ENV": "staging"}) == "dev\n"
        assert run(source, {"ENV": "production"}) == ""

    def test_single_equals(self):
        """= is the same as =="""
        assert run("// @if ENV='prod'\nx\n// @endif\n", {"ENV": "prod"}) == "x\n"

    def test_number_and_bool_values(self):
        """Non-string values are compared in their string form"""
        assert run("// @if VERSION == 2\nx\n// @endif\n", {"VERSION": 2}) == "x\n"
        assert run("// @if VERSION == 2\nx\n// @endif\n", {"VERSION": 2.0}) == "x\n"
        assert run("// @if DEBUG == true\nx\n// @endif\n", {"DEBUG": True}) == "x\n"

    def test_missing_key_compares_empty(self):
        """A missing key stringifies to the empty string"""
        assert run("// @if MISSING != x\ny\n// @endif\n", {}) == "y\n"
        assert run("// @if MISSING == ''\ny\n// @endif\n", {}) == "y\n"


class TestDefinedness:
    """Test @ifdef / @ifndef"""

    @pytest.mark.parametrize("value", [False, 0, "", None])
    def test_ifdef_ignores_value(self, value):
        """A present key counts as defined whatever its value"""
        assert run("// @ifdef FLAG\nyes\n// @endif\n", {"FLAG": value}) == "yes\n"
        assert run("// @ifndef FLAG\nno\n// @endif\n", {"FLAG": value}) == ""

    def test_undefined(self):
        """Absent key"""
        assert run("// @ifdef FLAG\nyes\n// @endif\n", {}) == ""
        assert run("// @ifndef FLAG\nno\n// @endif\n", {}) == "no\n"

    def test_ifdef_else(self):
        """@else after @ifdef"""
        source = "// @ifdef API\nremote\n// @else\nlocal\n// @endif\n"

        assert run(source, {}) == "local\n"


class TestElif:
    """Test @elif chains"""

    SOURCE = "// @if A\none\n// @elif B\ntwo\n// @else\nthree\n// @endif\n"

    @pytest.mark.parametrize(
        "context, expected",
        [
            ({"A": 1, "B": 1}, "one\n"),
            ({"A": 0, "B": 1}, "two\n"),
            ({}, "three\n"),
        ],
    )
    def test_exactly_one_branch(self, context, expected):
        """At most one branch of a chain is emitted"""
        assert run(self.SOURCE, context) == expected

    def test_later_elif_after_match(self):
        """An @elif after a matched branch is skipped even when true"""
        source = "// @if A\none\n// @elif A\nagain\n// @endif\n"

        assert run(source, {"A": True}) == "one\n"

    def test_elif_inside_suppressed_parent(self):
        """A true @elif in a suppressed parent stays suppressed"""
        source = "// @if OUTER\n// @if A\na\n// @elif B\nb\n// @endif\n// @endif\nafter\n"

        assert run(source, {"B": True}) == "after\n"


class TestNesting:
    """Test nested conditionals"""

    SOURCE = "// @if A\na\n// @if B\nab\n// @endif\n// @endif\n"

    def test_both_true(self):
        """Inner block emitted only when every ancestor is emitting"""
        assert run(self.SOURCE, {"A": 1, "B": 1}) == "a\nab\n"

    def test_inner_false(self):
        """Outer block still emitted"""
        assert run(self.SOURCE, {"A": 1}) == "a\n"

    def test_outer_false(self):
        """A true inner block in a false outer block is dropped"""
        assert run(self.SOURCE, {"B": 1}) == ""

    def test_else_in_suppressed_parent(self):
        """@else never re-enables a suppressed parent"""
        source = "// @if A\n// @if B\nb\n// @else\nnot-b\n// @endif\n// @endif\n"

        assert run(source, {}) == ""


class TestExclude:
    """Test @exclude / @endexclude"""

    def test_exclude_block_dropped(self):
        """Content between the markers never appears"""
        source = "a\n/* @exclude */\nb\n/* @endexclude */\nc\n"

        assert run(source, {}) == "a\nc\n"

    def test_directives_inside_exclude(self):
        """Nested conditionals inside an exclude stay balanced and dropped"""
        source = "/* @exclude */\n// @if A\nx\n// @endif\n/* @endexclude */\n"

        assert run(source, {"A": True}) == ""

    def test_endexclude_without_exclude(self):
        """Stray @endexclude"""
        with pytest.raises(StructuralError, match="without a matching"):
            run("// @endexclude\n", {})

    def test_endif_cannot_close_exclude(self):
        """@endif inside an open @exclude"""
        with pytest.raises(StructuralError, match="inside @exclude"):
            run("// @exclude\n// @endif\n", {})


class TestStructuralErrors:
    """Test unbalanced and malformed directives"""

    def test_unterminated_if(self):
        """Missing @endif names the opening line"""
        with pytest.raises(StructuralError, match="Unterminated @if opened at line 2") as info:
            run("x\n// @if A\ny\n", {"A": True})

        assert info.value.line == 2
        assert info.value.file == "<string>"

    def test_stray_endif(self):
        """@endif with nothing open"""
        with pytest.raises(StructuralError, match="without a matching"):
            run("// @endif\n", {})

    def test_stray_else(self):
        """@else with nothing open"""
        with pytest.raises(StructuralError, match="@else without a matching @if"):
            run("// @else\n", {})

    def test_stray_elif(self):
        """@elif with nothing open"""
        with pytest.raises(StructuralError, match="@elif without a matching @if"):
            run("// @elif A\n", {})

    def test_else_after_else(self):
        """Second @else in one block"""
        with pytest.raises(StructuralError, match="after @else"):
            run("// @if A\n// @else\n// @else\n// @endif\n", {})

    def test_elif_after_else(self):
        """@elif following @else"""
        with pytest.raises(StructuralError, match="after @else"):
            run("// @if A\n// @else\n// @elif B\n// @endif\n", {})

    def test_missing_condition(self):
        """@if without an expression"""
        with pytest.raises(StructuralError, match="@if requires an argument"):
            run("// @if\n// @endif\n", {})

    def test_malformed_condition(self):
        """Expression outside the condition language"""
        with pytest.raises(StructuralError, match="Malformed condition"):
            run("// @if A B\n// @endif\n", {})

    def test_error_text_has_location(self):
        """Message carries file and line"""
        with pytest.raises(StructuralError, match=r"\(<string>, line 1\)"):
            run("// @endif\n", {})


class TestPassThrough:
    """Test sources without directives"""

    def test_no_directives_unchanged(self):
        """Plain text is returned as is"""
        source = "var a = 1;\n\n// a comment\nvar b = '@if';\n"

        assert run(source, {}) == source

    def test_idempotent(self):
        """Preprocessing the output again changes nothing"""
        source = "// @if A\nkeep\n// @endif\n// @echo A\n"
        once = run(source, {"A": "kept"})

        assert run(once, {"A": "kept"}) == once

    def test_unknown_directive_kept(self):
        """Unregistered @words inside comments stay literal"""
        source = "// @todo tidy up\n/* @license MIT */\n"

        assert run(source, {}) == source


class TestConditionalStack:
    """Test the state machine directly"""

    def test_empty_stack_emits(self):
        """Nothing open means emitting"""
        stack = ConditionalStack()

        assert stack.emitting is True
        assert stack.depth == 0

    def test_else_flips(self):
        """@else takes over when the @if did not match"""
        stack = ConditionalStack()
        stack.push("if", False, 1)
        assert stack.emitting is False

        stack.branch_else(3)
        assert stack.emitting is True

        stack.pop("endif", 5)
        assert stack.depth == 0

    def test_finish_reports_innermost(self):
        """finish() names the innermost open directive"""
        stack = ConditionalStack("page.html")
        stack.push("if", True, 1)
        stack.push("ifdef", True, 4)

        with pytest.raises(StructuralError, match="Unterminated @ifdef opened at line 4"):
            stack.finish()


class TestConditionEvaluate:
    """Test the expression evaluator"""

    def test_truthiness(self):
        """Plain name"""
        assert condition_evaluate("A", {"A": "x"}) is True
        assert condition_evaluate("A", {}) is False

    def test_whitespace_around_operator(self):
        """Blanks around the operator are optional"""
        assert condition_evaluate("ENV=='prod'", {"ENV": "prod"}) is True
        assert condition_evaluate("ENV  ==  prod", {"ENV": "prod"}) is True

    def test_malformed(self):
        """Garbage expressions raise with the given location"""
        with pytest.raises(StructuralError) as info:
            condition_evaluate("A == ", {}, "x.js", 7)

        assert info.value.file == "x.js"
        assert info.value.line == 7
