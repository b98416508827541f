"""Tests for markdown rendering and minification."""

from contentgen.render import MINIFY_DEFAULTS, Renderer, merge_minify_options


class TestRenderer:
    def test_renders_markdown(self):
        html = Renderer(minify=False).render("# Title\n\nSome *text*.")
        assert "<h1>Title</h1>" in html
        assert "<em>text</em>" in html

    def test_minified_output(self):
        html = Renderer().render("# Title\n\nFirst paragraph.\n\nSecond paragraph.")
        assert "<h1>Title</h1>" in html
        assert "<p>First paragraph.</p>" in html
        assert len(html) <= len(Renderer(minify=False).render("# Title\n\nFirst paragraph.\n\nSecond paragraph."))

    def test_summary_markers_survive(self):
        html = Renderer().render("Intro.\n\n<!--summary-end-->\n\nRest of it.")
        assert "<!--summary-end-->" in html

    def test_fenced_code_highlighted(self):
        html = Renderer(minify=False).render("```python\nprint('hi')\n```")
        assert "codehilite" in html

    def test_tables(self):
        html = Renderer(minify=False).render("| a | b |\n|---|---|\n| 1 | 2 |")
        assert "<table>" in html


class TestMinifyOptions:
    def test_defaults(self):
        assert merge_minify_options() == MINIFY_DEFAULTS

    def test_override(self):
        options = merge_minify_options({"remove_comments": True, "pre_tags": ["pre"]})
        assert options["remove_comments"] is True
        assert options["pre_tags"] == ("pre",)

    def test_unknown_option_ignored(self):
        options = merge_minify_options({"shrink_everything": True})
        assert "shrink_everything" not in options
