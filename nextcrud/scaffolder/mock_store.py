"""Mock data store registration.

The generated project serves fake data with json-server from
``mock/server.json``: a JSON object whose top-level keys are collection
names (``orders``) and whose values are arrays of records.  Registering a
feature adds its collection, overwriting any previous value at that key.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from nextcrud.config import ProjectLayout
from nextcrud.errors import StoreNotFound
from nextcrud.utils import load_json, save_json


class FixtureRecord(BaseModel):
    """One canned sample identity served by the mock server."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="UUID string")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    age: int = Field(..., ge=0)
    email: str
    password: str

    def as_json(self) -> dict[str, Any]:
        """Return the record with its camelCase JSON keys."""
        return self.model_dump(by_alias=True)


DEFAULT_FIXTURES: tuple[FixtureRecord, ...] = (
    FixtureRecord(
        id="45f6402e-f4be-43e4-973c-b13bc5e9e949",
        firstName="Alexander",
        lastName="Wilson",
        age=33,
        email="alex.wilson@example.com",
        password="alexW@33!",
    ),
    FixtureRecord(
        id="2de875cc-c42e-4f25-b72a-9126cfe94ed2",
        firstName="Olivia",
        lastName="Anderson",
        age=22,
        email="olivia.anderson@example.com",
        password="OliviaA22#",
    ),
    FixtureRecord(
        id="81f39980-d3a7-43c4-a82c-78115d61e542",
        firstName="David",
        lastName="Thomas",
        age=34,
        email="david.thomas@example.com",
        password="dThomas#34",
    ),
)


async def register_fixtures(
    project_root: str | Path,
    collection_key: str,
    records: Iterable[FixtureRecord | Mapping[str, Any]] | None = None,
    layout: ProjectLayout | None = None,
) -> Path:
    """Set ``store[collection_key] = records`` in the project's mock store.

    Last write wins: any existing value under *collection_key* is replaced,
    never merged.  Other keys are untouched.  The store is rewritten as
    2-space-indented JSON.

    Args:
        project_root: Target project root.
        collection_key: Top-level key, usually the pluralized entity name.
        records: Records to store.  Defaults to :data:`DEFAULT_FIXTURES`.
        layout: Project layout (location of the store).

    Returns:
        Path to the rewritten store.

    Raises:
        StoreNotFound: If the store file is missing, is not valid JSON, or
            does not hold a JSON object.
    """
    layout = layout or ProjectLayout()
    store_path = layout.fixture_store_path(Path(project_root))

    if not store_path.is_file():
        raise StoreNotFound(f"Mock data store not found at {store_path}", path=store_path)

    try:
        store = load_json(store_path)
    except json.JSONDecodeError as exc:
        raise StoreNotFound(
            f"Mock data store at {store_path} is not valid JSON: {exc}", path=store_path
        ) from exc
    if not isinstance(store, dict):
        raise StoreNotFound(
            f"Mock data store at {store_path} does not contain a JSON object",
            path=store_path,
        )

    if records is None:
        records = DEFAULT_FIXTURES
    store[collection_key] = [_to_json(record) for record in records]

    await save_json(store, store_path)
    return store_path


def _to_json(record: FixtureRecord | Mapping[str, Any]) -> Any:
    if isinstance(record, FixtureRecord):
        return record.as_json()
    return dict(record) if isinstance(record, Mapping) else record
