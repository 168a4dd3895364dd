"""
Template tests - @extend with @block / @endblock overrides
"""

import pytest
from pathlib import Path

from prepro.lib.api import preprocess
from prepro.lib.errors import CircularIncludeError, IncludeNotFoundError, StructuralError


LAYOUT = (
    "<html>\n"
    "<!-- @block title -->\n"
    "<title>Default</title>\n"
    "<!-- @endblock -->\n"
    "<!-- @block body -->\n"
    "<p>default body</p>\n"
    "<!-- @endblock -->\n"
    "</html>\n"
)


def write(path: Path, text: str) -> Path:
    """Write text without newline translation"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return path


def run(source, context, srcDir, **options):
    """Preprocess an html source against srcDir"""
    merged = {"type": "html", "srcEol": "\n", "srcDir": str(srcDir), **options}
    return preprocess(source, context, merged)


@pytest.fixture
def layout_dir(tmp_path):
    """Directory holding layout.html"""
    write(tmp_path / "layout.html", LAYOUT)
    return tmp_path


class TestBlocksInPlace:
    """Test @block without @extend"""

    def test_template_alone(self, layout_dir):
        """Blocks render their default content in place"""
        result = run(LAYOUT, {}, layout_dir)

        assert result == "<html>\n<title>Default</title>\n<p>default body</p>\n</html>\n"

    def test_conditional_inside_block(self, tmp_path):
        """Conditionals apply inside block content"""
        source = "<!-- @block a -->\n<!-- @if X -->\nx\n<!-- @endif -->\ny\n<!-- @endblock -->\n"

        assert run(source, {}, tmp_path) == "y\n"

    def test_block_in_suppressed_branch(self, tmp_path):
        """Blocks inside a false conditional vanish with it"""
        source = "<!-- @if X -->\n<!-- @block a -->\nx\n<!-- @endblock -->\n<!-- @endif -->\nz\n"

        assert run(source, {}, tmp_path) == "z\n"


class TestExtend:
    """Test overriding template blocks"""

    def test_override_one_block(self, layout_dir):
        """Overridden block replaced, others keep their default"""
        page = (
            "<!-- @extend layout.html -->\n"
            "<!-- @block body -->\n"
            "<p>page body</p>\n"
            "<!-- @endblock -->\n"
        )

        result = run(page, {}, layout_dir)

        assert result == "<html>\n<title>Default</title>\n<p>page body</p>\n</html>\n"

    def test_override_all_blocks(self, layout_dir):
        """Block order in the extending file does not matter"""
        page = (
            "<!-- @extend layout.html -->\n"
            "<!-- @block body -->\n"
            "B\n"
            "<!-- @endblock -->\n"
            "<!-- @block title -->\n"
            "T\n"
            "<!-- @endblock -->\n"
        )

        assert run(page, {}, layout_dir) == "<html>\nT\nB\n</html>\n"

    def test_no_blocks_gives_template(self, layout_dir):
        """Extending without overrides renders the template's defaults"""
        result = run("<!-- @extend layout.html -->\n", {}, layout_dir)

        assert result == run(LAYOUT, {}, layout_dir)

    def test_text_around_extend_kept(self, layout_dir):
        """Lines outside blocks stay at their position"""
        page = "<!DOCTYPE html>\n<!-- @extend layout.html -->\n"

        assert run(page, {}, layout_dir).startswith("<!DOCTYPE html>\n<html>\n")

    def test_conditional_in_override(self, layout_dir):
        """Override content is preprocessed in the extending file's context"""
        page = (
            "<!-- @extend layout.html -->\n"
            "<!-- @block body -->\n"
            "<!-- @if USER -->\n"
            "<p>welcome <!-- @echo USER --></p>\n"
            "<!-- @else -->\n"
            "<p>please log in</p>\n"
            "<!-- @endif -->\n"
            "<!-- @endblock -->\n"
        )

        assert "<p>welcome ann</p>" in run(page, {"USER": "ann"}, layout_dir)
        assert "<p>please log in</p>" in run(page, {}, layout_dir)

    def test_multi_level(self, tmp_path):
        """Blocks flow through a chain of templates, nearest override wins"""
        write(
            tmp_path / "base.html",
            "base-start\n<!-- @block a -->\nbase-a\n<!-- @endblock -->\n"
            "<!-- @block b -->\nbase-b\n<!-- @endblock -->\nbase-end\n",
        )
        write(
            tmp_path / "mid.html",
            "<!-- @extend base.html -->\n<!-- @block a -->\nmid-a\n<!-- @endblock -->\n"
            "<!-- @block b -->\nmid-b\n<!-- @endblock -->\n",
        )
        page = "<!-- @extend mid.html -->\n<!-- @block b -->\npage-b\n<!-- @endblock -->\n"

        assert run(page, {}, tmp_path) == "base-start\nmid-a\npage-b\nbase-end\n"

    def test_nested_blocks(self, tmp_path):
        """Inner and outer blocks can each be overridden"""
        write(
            tmp_path / "nest.html",
            "<!-- @block outer -->\nA\n<!-- @block inner -->\nB\n<!-- @endblock -->\nC\n<!-- @endblock -->\n",
        )
        inner = "<!-- @extend nest.html -->\n<!-- @block inner -->\nb\n<!-- @endblock -->\n"
        outer = "<!-- @extend nest.html -->\n<!-- @block outer -->\nall\n<!-- @endblock -->\n"

        assert run(inner, {}, tmp_path) == "A\nb\nC\n"
        assert run(outer, {}, tmp_path) == "all\n"

    def test_template_in_subdirectory(self, tmp_path):
        """Template includes resolve from the template's directory"""
        write(tmp_path / "layouts" / "base.html", "<!-- @include footer.html -->\n")
        write(tmp_path / "layouts" / "footer.html", "footer\n")

        assert run("<!-- @extend layouts/base.html -->\n", {}, tmp_path) == "footer\n"


class TestExtendErrors:
    """Test structural problems with blocks and templates"""

    def test_stray_endblock(self, tmp_path):
        """@endblock with no open block"""
        with pytest.raises(StructuralError, match="without a matching @block"):
            run("<!-- @endblock -->\n", {}, tmp_path)

    def test_unterminated_block(self, tmp_path):
        """Block left open at end of input"""
        with pytest.raises(StructuralError, match="Unterminated @block main opened at line 1"):
            run("<!-- @block main -->\nx\n", {}, tmp_path)

    def test_block_needs_name(self, tmp_path):
        """@block without a name"""
        with pytest.raises(StructuralError, match="@block requires an argument"):
            run("<!-- @block -->\n<!-- @endblock -->\n", {}, tmp_path)

    def test_extend_inside_block(self, layout_dir):
        """@extend may not appear inside a block"""
        with pytest.raises(StructuralError, match="@extend inside @block a"):
            run("<!-- @block a -->\n<!-- @extend layout.html -->\n<!-- @endblock -->\n", {}, layout_dir)

    def test_extend_without_path(self, tmp_path):
        """@extend needs a path"""
        with pytest.raises(StructuralError, match="@extend requires an argument"):
            run("<!-- @extend -->\n", {}, tmp_path)

    def test_missing_template(self, tmp_path):
        """Missing template raises like a missing include"""
        with pytest.raises(IncludeNotFoundError):
            run("<!-- @extend nope.html -->\n", {}, tmp_path)

    def test_missing_template_silent(self, tmp_path):
        """Silent fail marks the missing template"""
        result = run("<!-- @extend nope.html -->\n", {}, tmp_path, fileNotFoundSilentFail=True)

        assert result.startswith("<!-- The file ")

    def test_template_extends_itself(self, tmp_path):
        """Self-extending template"""
        write(tmp_path / "loop.html", "<!-- @extend loop.html -->\n")

        with pytest.raises(CircularIncludeError):
            run("<!-- @extend loop.html -->\n", {}, tmp_path)
