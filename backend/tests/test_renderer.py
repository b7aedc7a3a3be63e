"""
Tests for the Template Renderer and asset helpers.

Requires Python 3.11+.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from compiler.helpers import AssetTagHelpers
from compiler.models import FailureKind, RenderFailure, RenderSuccess
from compiler.renderer import Jinja2Engine, TemplateRenderer


class ExplodingEngine:
    """Engine that fails with an arbitrary exception type."""

    def render(self, template_text, options, context):
        raise KeyError("missing partial")


class TestTemplateRenderer:
    """Test cases for TemplateRenderer."""

    @pytest.fixture
    def renderer(self) -> TemplateRenderer:
        """Create a renderer with the default engine."""
        return TemplateRenderer()

    def test_render_success(self, renderer: TemplateRenderer, write_source: Callable):
        """Test rendering a valid template."""
        source = write_source("src/hello.j2", "{% for i in range(3) %}{{ i }}{% endfor %} done\n")

        result = renderer.render(source)

        assert isinstance(result, RenderSuccess)
        assert result.ok
        assert result.source_path == source
        assert result.text == "012 done\n"

    def test_render_options_globals(self, renderer: TemplateRenderer, write_source: Callable):
        """Test render options are forwarded to the engine."""
        source = write_source("src/hello.j2", "Hello {{ name }}!")

        result = renderer.render(source, {"globals": {"name": "World"}})

        assert isinstance(result, RenderSuccess)
        assert result.text == "Hello World!"

    def test_missing_source(self, renderer: TemplateRenderer, project_dir: Path):
        """Test an unreadable source becomes a read failure."""
        result = renderer.render(project_dir / "missing.j2")

        assert isinstance(result, RenderFailure)
        assert not result.ok
        assert result.kind == FailureKind.READ

    def test_undecodable_source(self, renderer: TemplateRenderer, project_dir: Path):
        """Test a non UTF-8 source becomes a read failure."""
        source = project_dir / "latin1.j2"
        source.write_bytes(b"caf\xe9")

        result = renderer.render(source)

        assert isinstance(result, RenderFailure)
        assert result.kind == FailureKind.READ

    def test_undefined_variable(self, renderer: TemplateRenderer, write_source: Callable):
        """Test undefined references fail instead of rendering blanks."""
        source = write_source("src/broken.j2", "{{ nope }}")

        result = renderer.render(source)

        assert isinstance(result, RenderFailure)
        assert result.kind == FailureKind.RENDER
        assert "nope" in result.message

    def test_syntax_error(self, renderer: TemplateRenderer, write_source: Callable):
        """Test malformed template syntax."""
        source = write_source("src/broken.j2", "{% if %}")

        result = renderer.render(source)

        assert isinstance(result, RenderFailure)
        assert result.kind == FailureKind.RENDER

    def test_engine_exception_never_escapes(self, write_source: Callable):
        """Test any engine exception is converted to a failure."""
        renderer = TemplateRenderer(engine=ExplodingEngine())
        source = write_source("src/page.j2", "anything")

        result = renderer.render(source)

        assert isinstance(result, RenderFailure)
        assert "missing partial" in result.message

    def test_helpers_reach_template(self, write_source: Callable):
        """Test caller-supplied helpers are callable from templates."""
        renderer = TemplateRenderer(helpers={"shout": lambda s: s.upper()})
        source = write_source("src/page.j2", "{{ shout('hi') }}")

        result = renderer.render(source)

        assert isinstance(result, RenderSuccess)
        assert result.text == "HI"

    def test_include_from_search_path(self, project_dir: Path, write_source: Callable):
        """Test includes resolve against the engine search paths."""
        write_source("src/_header.j2", "<h1>Title</h1>")
        source = write_source("src/page.j2", "{% include '_header.j2' %}\n<p>Body</p>\n")
        renderer = TemplateRenderer(engine=Jinja2Engine(search_paths=[project_dir / "src"]))

        result = renderer.render(source)

        assert isinstance(result, RenderSuccess)
        assert result.text == "<h1>Title</h1><p>Body</p>\n"


class TestAssetTagHelpers:
    """Test cases for AssetTagHelpers."""

    @pytest.fixture
    def helpers(self) -> AssetTagHelpers:
        """Create helpers."""
        return AssetTagHelpers()

    def test_stylesheet_link_tag(self, helpers: AssetTagHelpers):
        """Test the build directory prefix is stripped from hrefs."""
        tag = helpers.stylesheet_link_tag(".tmp/styles/app.css")

        assert tag == '<link rel="stylesheet" media="screen" href="styles/app.css" />'

    def test_stylesheet_attribute_override(self, helpers: AssetTagHelpers):
        """Test keyword attributes override the defaults."""
        tag = helpers.stylesheet_link_tag("print.css", media="print")

        assert tag == '<link rel="stylesheet" media="print" href="print.css" />'

    def test_javascript_include_tag_dedupes(self, helpers: AssetTagHelpers):
        """Test one script tag per unique source, in order."""
        tag = helpers.javascript_include_tag("a.js", ".tmp/b.js", "a.js")

        assert tag == '<script src="a.js"></script>\n<script src="b.js"></script>'

    def test_boolean_attributes(self, helpers: AssetTagHelpers):
        """Test boolean attributes render bare and false ones are dropped."""
        tag = helpers.javascript_include_tag("app.js", defer=True, async_=False)

        assert tag == '<script src="app.js" defer></script>'

    def test_attribute_values_escaped(self, helpers: AssetTagHelpers):
        """Test attribute values are HTML-escaped."""
        tag = helpers.stylesheet_link_tag('x".css')

        assert 'href="x&#34;.css"' in tag

    def test_helpers_in_template(self, helpers: AssetTagHelpers, write_source: Callable):
        """Test helpers render through the renderer."""
        renderer = TemplateRenderer(helpers=helpers.as_context())
        source = write_source(
            "src/layout.j2",
            "{{ stylesheet_link_tag('.tmp/app.css') }}\n{{ javascript_include_tag('app.js') }}\n",
        )

        result = renderer.render(source)

        assert isinstance(result, RenderSuccess)
        assert result.text == (
            '<link rel="stylesheet" media="screen" href="app.css" />\n'
            '<script src="app.js"></script>\n'
        )
