"""Template tree materialization.

Copies a template tree into a target project.  Every copy is staged: the
tree is first written to a hidden sibling directory of the destination and
only moved into place once the whole tree was produced, so a failed copy
never leaves half a template behind in the project.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from nextcrud.errors import TemplateNotFound


class MaterializeMode(str, Enum):
    """Where a template tree lands.

    ``REPLACE`` -- the destination is the whole target project (used once,
    when the project is created).  ``MERGE`` -- the destination is a
    subdirectory of an already-materialized project.
    """

    REPLACE = "replace"
    MERGE = "merge"


async def materialize(
    template_root: str | Path,
    destination_root: str | Path,
    mode: MaterializeMode = MaterializeMode.REPLACE,
) -> list[Path]:
    """Copy the tree rooted at *template_root* into *destination_root*.

    Structure and file contents are preserved byte-for-byte.  Files already
    present at the destination under the same relative path are
    overwritten; everything else in the destination is kept.

    Args:
        template_root: Root of the template tree to copy.
        destination_root: Target directory.  Created (with any missing
            parents) in ``REPLACE`` mode.
        mode: See :class:`MaterializeMode`.

    Returns:
        Sorted list of destination file paths written.

    Raises:
        TemplateNotFound: If *template_root* is not a directory.  Nothing
            is written in that case.
        FileNotFoundError: In ``MERGE`` mode, if the destination's parent
            directory does not exist.
    """
    source = Path(template_root)
    destination = Path(destination_root)
    if not source.is_dir():
        raise TemplateNotFound(source)
    if mode is MaterializeMode.MERGE and not destination.parent.is_dir():
        raise FileNotFoundError(
            f"Cannot merge into {destination}: {destination.parent} does not exist"
        )

    def _populate(staging: Path) -> None:
        shutil.copytree(source, staging, dirs_exist_ok=True)

    return await asyncio.to_thread(stage_and_commit, destination, _populate)


async def copy_file_if_missing(source: str | Path, destination: str | Path) -> bool:
    """Copy a single file unless the destination already exists.

    Returns ``True`` if the file was copied, ``False`` if it was skipped.

    Raises:
        TemplateNotFound: If *source* is not a file.
    """
    src = Path(source)
    dest = Path(destination)
    if not src.is_file():
        raise TemplateNotFound(src)
    if dest.exists():
        return False

    def _copy() -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dest)

    await asyncio.to_thread(_copy)
    return True


# ---------------------------------------------------------------------------
# Staging
# ---------------------------------------------------------------------------


def stage_and_commit(
    destination: Path,
    populate: Callable[[Path], None],
) -> list[Path]:
    """Build a tree in a staging directory, then move it into *destination*.

    *populate* receives an empty staging directory and must write the
    complete tree into it.  If it raises, the staging directory is removed
    and the exception propagates with the destination untouched.

    Synchronous; callers on the event loop wrap it in ``asyncio.to_thread``.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(
        tempfile.mkdtemp(prefix=f".{destination.name}.staging-", dir=destination.parent)
    )
    try:
        populate(staging)
        return _commit(staging, destination)
    finally:
        shutil.rmtree(staging, ignore_errors=True)


def _commit(staging: Path, destination: Path) -> list[Path]:
    """Move every entry of *staging* to the same relative path under *destination*."""
    destination.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(staging):
        rel = Path(dirpath).relative_to(staging)
        target_dir = destination / rel
        target_dir.mkdir(parents=True, exist_ok=True)
        dirnames.sort()
        for name in sorted(filenames):
            target = target_dir / name
            os.replace(Path(dirpath) / name, target)
            written.append(target)

    return sorted(written)
