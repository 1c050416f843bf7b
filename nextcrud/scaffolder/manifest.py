"""``package.json`` script merging."""

from __future__ import annotations

import json
from pathlib import Path

from nextcrud.config import ProjectLayout
from nextcrud.errors import ManifestError
from nextcrud.utils import load_json, print_warning, save_json


async def merge_scripts(
    project_root: str | Path,
    scripts: dict[str, str],
    layout: ProjectLayout | None = None,
) -> bool:
    """Merge *scripts* into the ``scripts`` mapping of ``package.json``.

    Existing scripts are kept; a script with the same name as one in
    *scripts* is overwritten.  The manifest is written back as
    2-space-indented JSON.

    Returns:
        ``True`` if the manifest was updated, ``False`` if it does not
        exist (a warning is printed).

    Raises:
        ManifestError: If the manifest is not a JSON object.
    """
    layout = layout or ProjectLayout()
    manifest_path = layout.manifest_path(Path(project_root))

    if not manifest_path.is_file():
        print_warning(f"package.json not found at {manifest_path}; skipping custom scripts.")
        return False

    try:
        manifest = load_json(manifest_path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestError(
            f"package.json at {manifest_path} is not valid JSON: {exc}", path=manifest_path
        ) from exc
    if not isinstance(manifest, dict):
        raise ManifestError(
            f"package.json at {manifest_path} does not contain a JSON object",
            path=manifest_path,
        )

    manifest["scripts"] = {**(manifest.get("scripts") or {}), **scripts}
    await save_json(manifest, manifest_path)
    return True
