"""Route list registration.

Appends a navigation entry for a new feature to the route list in
``src/routes.tsx``.  The list is located by its closing anchor (the last
``];`` in the file) rather than by parsing TSX; the new entry is spliced in
immediately before the anchor and every other byte of the file is left as
it was.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from nextcrud.config import GenerationConfig, ProjectLayout
from nextcrud.errors import AnchorNotFound

from .templates import SnippetRenderer

ROUTE_ENTRY_TEMPLATE = """\
  {
    icon: {{ icon }},
    label: "{{ label_prefix }} {{ entity | capitalize_first }}",
    url: "{{ url_prefix }}/{{ entity }}",
  },
"""

_renderer = SnippetRenderer()


def route_url(entity: str, url_prefix: str = "/v1") -> str:
    """URL path a feature is served under: ``/v1/<entity>``."""
    return f"{url_prefix.rstrip('/')}/{entity}"


def build_route_entry(
    entity: str,
    generation: GenerationConfig | None = None,
) -> str:
    """Render the route entry block for *entity*.

    The block is a TSX object literal ending in ``},\\n`` so it can be
    placed directly before the list's closing anchor.
    """
    generation = generation or GenerationConfig()
    return _renderer.render_string(
        ROUTE_ENTRY_TEMPLATE,
        {
            "entity": entity,
            "icon": generation.route_icon,
            "label_prefix": generation.label_prefix,
            "url_prefix": generation.url_prefix.rstrip("/"),
        },
    )


def insert_route(text: str, entry: str, anchor: str = "];") -> str:
    """Splice *entry* into *text* immediately before the last *anchor*.

    Raises:
        AnchorNotFound: If *anchor* does not occur in *text*.
    """
    index = text.rfind(anchor)
    if index == -1:
        raise AnchorNotFound(f"Route list anchor {anchor!r} not found")
    return text[:index] + entry + text[index:]


def is_registered(text: str, entity: str, url_prefix: str = "/v1") -> bool:
    """Return ``True`` if *text* already holds an entry for *entity*'s URL."""
    url = re.escape(route_url(entity, url_prefix))
    return re.search(rf"""url:\s*["'`]{url}["'`]""", text) is not None


async def register_route(
    project_root: str | Path,
    entity: str,
    layout: ProjectLayout | None = None,
    generation: GenerationConfig | None = None,
) -> Path:
    """Append a route entry for *entity* to the project's route list.

    Not idempotent: each call appends one more entry.  Callers use the
    conflict guard (or :func:`is_registered`) to avoid duplicates.

    Returns:
        Path to the rewritten routes file.

    Raises:
        AnchorNotFound: If the routes file is missing or has no anchor.
    """
    layout = layout or ProjectLayout()
    generation = generation or GenerationConfig()
    routes_file = layout.routes_path(Path(project_root))

    if not routes_file.is_file():
        raise AnchorNotFound(
            f"Routes file not found at {routes_file}", path=routes_file, entity=entity
        )

    text = await asyncio.to_thread(_read_text, routes_file)
    entry = build_route_entry(entity, generation)
    try:
        updated = insert_route(text, entry, generation.route_anchor)
    except AnchorNotFound as exc:
        raise AnchorNotFound(
            f"Routes array not found in {routes_file}", path=routes_file, entity=entity
        ) from exc

    await asyncio.to_thread(_write_text, routes_file, updated)
    return routes_file


def _read_text(path: Path) -> str:
    # newline="" keeps the file's line endings byte-for-byte on the round trip
    with path.open("r", encoding="utf-8", newline="") as fh:
        return fh.read()


def _write_text(path: Path, content: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)
