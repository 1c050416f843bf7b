"""Tests for nextcrud.scaffolder.templates."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import UndefinedError

from nextcrud.config import DEFAULT_TEMPLATE_DIR
from nextcrud.errors import TemplateNotFound
from nextcrud.scaffolder.templates import SnippetRenderer, TemplateRepository

pytestmark = pytest.mark.unit


class TestTemplateRepository:
    def test_resolves_named_trees(self, template_root: Path):
        repo = TemplateRepository(template_root)
        assert repo.website() == template_root / "website"
        assert repo.handlers() == template_root / "example" / "core" / "handlers"
        assert repo.models() == template_root / "example" / "core" / "models"
        assert repo.page() == template_root / "example" / "v1" / "sample"
        assert repo.layout_file() == template_root / "example" / "v1" / "layout.tsx"

    def test_missing_tree_raises(self, tmp_path: Path):
        repo = TemplateRepository(tmp_path)
        with pytest.raises(TemplateNotFound) as exc_info:
            repo.website()
        assert exc_info.value.path == tmp_path / "website"
        assert str(exc_info.value) == f"Template not found at {tmp_path / 'website'}"

    def test_missing_file_raises(self, tmp_path: Path):
        (tmp_path / "example" / "v1").mkdir(parents=True)
        with pytest.raises(TemplateNotFound):
            TemplateRepository(tmp_path).layout_file()

    def test_feature_subtrees(self, template_root: Path):
        subtrees = TemplateRepository(template_root).feature_subtrees()
        assert subtrees == {
            "handlers": template_root / "example" / "core" / "handlers",
            "models": template_root / "example" / "core" / "models",
            "page": template_root / "example" / "v1" / "sample",
        }

    def test_feature_subtrees_missing_page(self, template_root: Path):
        with pytest.raises(TemplateNotFound):
            TemplateRepository(template_root).feature_subtrees("widget")

    def test_list_files_sorted_posix(self, template_root: Path):
        files = TemplateRepository(template_root).list_files("example", "v1", "sample")
        assert files == ["components/SampleTable.tsx", "page.tsx"]

    def test_defaults_to_bundled_templates(self):
        assert TemplateRepository().template_dir == DEFAULT_TEMPLATE_DIR


class TestBundledTemplates:
    """The templates shipped with the package satisfy the generators' contract."""

    def test_website_has_routes_anchor(self):
        routes = (DEFAULT_TEMPLATE_DIR / "website" / "src" / "routes.tsx").read_text("utf-8")
        assert "];" in routes
        assert "TbTemplate" in routes

    def test_website_store_is_empty_object(self):
        store = (DEFAULT_TEMPLATE_DIR / "website" / "mock" / "server.json").read_text("utf-8")
        assert store.strip() == "{}"

    def test_website_and_layout_free_of_placeholder(self):
        repo = TemplateRepository()
        for rel in repo.list_files("website"):
            text = (repo.website() / rel).read_text("utf-8")
            assert "sample" not in text.lower(), rel
        assert "sample" not in repo.layout_file().read_text("utf-8").lower()

    def test_feature_trees_use_placeholder(self):
        repo = TemplateRepository()
        assert repo.list_files("example", "core", "handlers") == ["sampleHandler.ts"]
        assert repo.list_files("example", "core", "models") == ["sampleModel.ts"]
        assert "page.tsx" in repo.list_files("example", "v1", "sample")


class TestSnippetRenderer:
    def test_render_with_filter(self):
        out = SnippetRenderer().render_string(
            "{{ name | capitalize_first }}", {"name": "orderItem"}
        )
        assert out == "OrderItem"

    def test_no_autoescape(self):
        out = SnippetRenderer().render_string("{{ icon }}", {"icon": "<TbTemplate />"})
        assert out == "<TbTemplate />"

    def test_trailing_newline_kept(self):
        assert SnippetRenderer().render_string("x\n", {}) == "x\n"

    def test_undefined_raises(self):
        with pytest.raises(UndefinedError):
            SnippetRenderer().render_string("{{ missing }}", {})
