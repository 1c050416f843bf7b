"""Exceptions raised by the generation engine.

Every error carries the filesystem path and, where one applies, the entity
name involved so the CLI can tell the user exactly what to fix before
retrying.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all generation failures."""

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        entity: str | None = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.entity = entity
        super().__init__(message)


class TemplateNotFound(ScaffoldError):
    """A required template tree or file is missing."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(f"Template not found at {path}", path=path)


class DuplicateFeature(ScaffoldError):
    """A feature with the same name already exists in the project."""

    def __init__(self, entity: str, path: str | Path, hint: str = "") -> None:
        self.hint = hint
        super().__init__(
            f'A page named "{entity}" already exists at {path}. '
            "Cannot create duplicate CRUD." + (f" {hint}" if hint else ""),
            path=path,
            entity=entity,
        )


class AnchorNotFound(ScaffoldError):
    """The route list file or its closing anchor is missing."""


class StoreNotFound(ScaffoldError):
    """The mock data store is missing or does not hold a JSON object."""


class MissingArgument(ScaffoldError):
    """A required command input was not supplied."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"{argument} is required.")


class InvalidEntityName(ScaffoldError):
    """The entity name cannot be used to name a feature."""

    def __init__(self, entity: str, reason: str) -> None:
        super().__init__(f'Invalid entity name "{entity}": {reason}', entity=entity)


class TemplateUnreadable(ScaffoldError):
    """A template file is not UTF-8 text."""

    def __init__(self, path: str | Path, reason: str) -> None:
        super().__init__(f"Template file {path} is not UTF-8 text: {reason}", path=path)


class ManifestError(ScaffoldError):
    """``package.json`` exists but cannot be read as a JSON object."""


class ConfigError(ScaffoldError):
    """The configuration file or ``NEXTCRUD_*`` environment is invalid."""
