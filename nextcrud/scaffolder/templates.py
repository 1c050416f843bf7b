"""Template trees and snippet rendering.

Provides two things the generators need from the template side:

* ``TemplateRepository`` resolves the named, read-only template trees
  shipped under ``nextcrud/templates/`` (the base ``website`` tree and the
  reusable ``example`` feature tree).
* ``SnippetRenderer`` renders small inline Jinja2 fragments, such as the
  route entry inserted into ``src/routes.tsx``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined

from nextcrud.config import DEFAULT_TEMPLATE_DIR
from nextcrud.errors import TemplateNotFound
from nextcrud.utils import capitalize_first


WEBSITE_TREE = "website"
EXAMPLE_TREE = "example"


# ---------------------------------------------------------------------------
# TemplateRepository
# ---------------------------------------------------------------------------


class TemplateRepository:
    """Read-only collection of named template trees.

    Layout under the template root::

        website/                  base project tree
        example/core/handlers/    request handlers keyed by the placeholder
        example/core/models/      model definitions keyed by the placeholder
        example/v1/sample/        page tree keyed by the placeholder
        example/v1/layout.tsx     shared layout, copied once per project
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)

    # -- Tree lookup -------------------------------------------------------

    def tree(self, *parts: str) -> Path:
        """Return the path of a required template tree.

        Raises:
            TemplateNotFound: If the tree does not exist.
        """
        path = self.template_dir.joinpath(*parts)
        if not path.is_dir():
            raise TemplateNotFound(path)
        return path

    def file(self, *parts: str) -> Path:
        """Return the path of a required template file."""
        path = self.template_dir.joinpath(*parts)
        if not path.is_file():
            raise TemplateNotFound(path)
        return path

    def website(self) -> Path:
        return self.tree(WEBSITE_TREE)

    def example_pages(self) -> Path:
        """The ``example/v1`` tree merged into the pages directory of example projects."""
        return self.tree(EXAMPLE_TREE, "v1")

    def example_core(self) -> Path:
        """The ``example/core`` tree merged into ``src`` for example projects."""
        return self.tree(EXAMPLE_TREE, "core")

    def handlers(self) -> Path:
        return self.tree(EXAMPLE_TREE, "core", "handlers")

    def models(self) -> Path:
        return self.tree(EXAMPLE_TREE, "core", "models")

    def page(self, placeholder: str = "sample") -> Path:
        return self.tree(EXAMPLE_TREE, "v1", placeholder)

    def layout_file(self) -> Path:
        return self.file(EXAMPLE_TREE, "v1", "layout.tsx")

    def feature_subtrees(self, placeholder: str = "sample") -> dict[str, Path]:
        """The trees instantiated per feature, keyed by generation step.

        All three are resolved up front so a missing one fails before the
        first feature file is written.
        """
        return {
            "handlers": self.handlers(),
            "models": self.models(),
            "page": self.page(placeholder),
        }

    # -- Utility -----------------------------------------------------------

    def list_files(self, *parts: str) -> list[str]:
        """Return a sorted list of every file under a tree.

        Paths are POSIX-style and relative to the tree root.
        """
        root = self.tree(*parts)
        return sorted(
            p.relative_to(root).as_posix()
            for p in root.rglob("*")
            if p.is_file()
        )


# ---------------------------------------------------------------------------
# SnippetRenderer
# ---------------------------------------------------------------------------


class SnippetRenderer:
    """Renders inline Jinja2 snippets for source-file mutations.

    Autoescaping is off because the output is TSX/JSON source, not HTML.
    Undefined variables raise instead of rendering as empty strings.
    """

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters["capitalize_first"] = capitalize_first

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

