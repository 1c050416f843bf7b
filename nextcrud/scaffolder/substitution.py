"""Entity-aware token substitution over template trees.

A feature template is keyed by a placeholder word (``sample``).  Turning it
into a concrete feature replaces that word in every path component and in
every file body, in two casings:

* ``sample`` -> the entity name as given (``order``)
* ``Sample`` -> the entity name with its first character upper-cased
  (``Order``)

Two matching modes are available.  ``literal`` replaces every substring
occurrence, including ones inside unrelated words.  ``identifier`` only
replaces occurrences that start an identifier hump and are not continued
by further lower-case letters (a single plural ``s`` is allowed), so
``resample`` and ``Sampler`` survive while ``sampleHandler``,
``useSampleStore`` and ``samples`` are rewritten.

Template files are UTF-8 text; binary templates are not supported.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Literal

from nextcrud.errors import TemplateNotFound, TemplateUnreadable
from nextcrud.utils import capitalize_first

from .materializer import stage_and_commit

SubstitutionMode = Literal["literal", "identifier"]


# ---------------------------------------------------------------------------
# Text substitution
# ---------------------------------------------------------------------------


class TokenSubstitution:
    """Replaces a placeholder token with an entity name in both casings."""

    def __init__(
        self,
        entity: str,
        placeholder: str = "sample",
        mode: SubstitutionMode = "literal",
    ) -> None:
        if not placeholder:
            raise ValueError("placeholder must not be empty")
        if mode not in ("literal", "identifier"):
            raise ValueError(f"Unknown substitution mode: {mode}")
        self.entity = entity
        self.placeholder = placeholder.lower()
        self.mode = mode
        self.replacements: list[tuple[str, str]] = [
            (self.placeholder, entity),
            (capitalize_first(self.placeholder), capitalize_first(entity)),
        ]
        self._patterns = [
            (re.compile(_identifier_pattern(token, capitalized=i == 1)), value)
            for i, (token, value) in enumerate(self.replacements)
        ]

    def apply(self, text: str) -> str:
        """Return *text* with both casings of the placeholder replaced.

        The lower-case pass runs first, then the capitalized pass; each is
        case-sensitive.
        """
        if self.mode == "literal":
            for token, value in self.replacements:
                text = text.replace(token, value)
            return text

        for pattern, value in self._patterns:
            text = pattern.sub(lambda _m, v=value: v, text)
        return text

    def rename(self, relative: PurePosixPath) -> PurePosixPath:
        """Apply the substitution to every component of a relative path."""
        return PurePosixPath(*(self.apply(part) for part in relative.parts))


def _identifier_pattern(token: str, capitalized: bool) -> str:
    # Lower-case form must not continue a preceding word; the capitalized
    # form starts a camel-case hump so any left neighbour is fine.
    prefix = "" if capitalized else r"(?<![A-Za-z])"
    return prefix + re.escape(token) + r"(?=s?(?![a-z]))"


# ---------------------------------------------------------------------------
# Tree instantiation
# ---------------------------------------------------------------------------


@dataclass
class InstantiatedTree:
    """In-memory result of instantiating a template tree.

    Paths are relative to the tree root and already renamed.
    """

    directories: list[PurePosixPath] = field(default_factory=list)
    files: dict[PurePosixPath, str] = field(default_factory=dict)

    def write(self, root: Path) -> list[Path]:
        """Write the tree under *root* and return the file paths written."""
        for directory in self.directories:
            (root / directory).mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for rel, content in self.files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            written.append(target)
        return written


def instantiate(
    template_root: str | Path,
    entity: str,
    placeholder: str = "sample",
    mode: SubstitutionMode = "literal",
) -> InstantiatedTree:
    """Read a template tree and return its renamed, rewritten copy.

    The result has exactly the shape of the template: one directory per
    template directory, one file per template file.  Only names and text
    differ.

    Raises:
        TemplateNotFound: If *template_root* is not a directory.
        TemplateUnreadable: If a template file is not UTF-8 text.
    """
    root = Path(template_root)
    if not root.is_dir():
        raise TemplateNotFound(root)

    substitution = TokenSubstitution(entity, placeholder, mode)
    tree = InstantiatedTree()
    for path in sorted(root.rglob("*")):
        rel = PurePosixPath(path.relative_to(root).as_posix())
        renamed = substitution.rename(rel)
        if path.is_dir():
            tree.directories.append(renamed)
        else:
            try:
                content = path.read_text(encoding="utf-8")
            except UnicodeDecodeError as exc:
                raise TemplateUnreadable(path, str(exc)) from exc
            tree.files[renamed] = substitution.apply(content)
    return tree


async def instantiate_to(
    template_root: str | Path,
    destination: str | Path,
    entity: str,
    placeholder: str = "sample",
    mode: SubstitutionMode = "literal",
) -> list[Path]:
    """Instantiate a template tree and write it into *destination*.

    The write goes through the materializer's staging area so a failure
    while rendering leaves the destination untouched.  Returns the sorted
    list of destination file paths.
    """
    tree = await asyncio.to_thread(
        instantiate, template_root, entity, placeholder, mode
    )
    return await asyncio.to_thread(
        stage_and_commit, Path(destination), tree.write
    )
