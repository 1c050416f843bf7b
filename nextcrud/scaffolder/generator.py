"""Project and feature generation orchestrators.

``ProjectGenerator`` creates a new Next.js project from the ``website``
template tree (optionally with the example feature merged in).
``FeatureGenerator`` adds one CRUD feature to an existing project:

1. conflict guard (refuse if the feature's page directory exists)
2. handlers, models, and page instantiated from the example tree
3. shared layout copied if missing
4. fixture collection registered in ``mock/server.json``
5. route entry appended to ``src/routes.tsx``

Steps run strictly one after another.  Nothing is rolled back when a step
fails; instead a small state record under ``.nextcrud/features/`` remembers
which steps finished so ``resume=True`` can complete the rest.  Without a
record, the steps are read back from the artifacts already on disk.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from nextcrud.bootstrap import create_next_app, install_dependencies
from nextcrud.config import Config
from nextcrud.errors import DuplicateFeature, MissingArgument
from nextcrud.utils import (
    console,
    load_json,
    pluralize,
    print_created,
    print_step_header,
    print_success,
    print_warning,
    save_json,
    validate_entity_name,
)

from .guard import ConflictGuard
from .manifest import merge_scripts
from .materializer import MaterializeMode, copy_file_if_missing, materialize
from .mock_store import DEFAULT_FIXTURES, register_fixtures
from .routes import is_registered, register_route, route_url
from .substitution import instantiate_to
from .templates import EXAMPLE_TREE, TemplateRepository


FEATURE_STEPS: tuple[str, ...] = (
    "handlers",
    "models",
    "page",
    "layout",
    "fixtures",
    "route",
)


class StarterTemplate(str, Enum):
    """Starter content for a new project."""

    BLANK = "blank"
    EXAMPLE = "example"


# ---------------------------------------------------------------------------
# Generation records
# ---------------------------------------------------------------------------


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FeatureState(BaseModel):
    """Persisted progress of one feature generation."""

    entity: str
    started_at: str = Field(default_factory=_now)
    updated_at: str = Field(default="")
    steps_completed: list[str] = Field(default_factory=list)
    written: list[str] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        return all(step in self.steps_completed for step in FEATURE_STEPS)

    @classmethod
    def load(cls, path: Path) -> "FeatureState":
        return cls.model_validate(load_json(path))

    async def save(self, path: Path) -> None:
        self.updated_at = _now()
        await save_json(self.model_dump(mode="json"), path)


class FeatureReport(BaseModel):
    """Outcome of :meth:`FeatureGenerator.add`."""

    entity: str
    project_root: Path
    collection_key: str
    route_url: str
    written: list[Path] = Field(default_factory=list)
    steps_run: list[str] = Field(default_factory=list)
    steps_skipped: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Feature generation
# ---------------------------------------------------------------------------


class FeatureGenerator:
    """Adds a CRUD feature to an existing project.

    Every path is derived from the *project_root* passed to :meth:`add`;
    nothing depends on the process working directory.
    """

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.templates = TemplateRepository(self.config.template_dir)
        self.guard = ConflictGuard(self.config.layout, self.config.generation)

    async def add(
        self,
        project_root: str | Path,
        entity: str,
        *,
        resume: bool = False,
    ) -> FeatureReport:
        """Generate the feature *entity* inside *project_root*.

        Args:
            project_root: Root of the target project.
            entity: Feature name, e.g. ``"order"``.
            resume: Continue a previous generation of *entity* that stopped
                part-way, skipping the steps it already finished.

        Raises:
            MissingArgument: *entity* is empty.
            InvalidEntityName: *entity* is not a usable path component.
            DuplicateFeature: The feature already exists (and there is no
                unfinished generation to resume).
            TemplateNotFound: A feature template is missing.
            StoreNotFound / AnchorNotFound: A project artifact the feature
                registers itself in is missing.
        """
        entity = validate_entity_name(entity)
        root = Path(project_root)
        layout = self.config.layout
        generation = self.config.generation
        state_path = self.config.feature_state_path(root, entity)

        state = self._resume_state(root, entity, state_path) if resume else None
        if state is None:
            try:
                self.guard.check(root, entity)
            except DuplicateFeature as exc:
                if self._state_from_artifacts(root, entity).complete:
                    raise
                raise DuplicateFeature(
                    entity, exc.path, hint="Run again with --resume to finish it."
                ) from exc
            state = FeatureState(entity=entity)

        # Resolve every template before the first write.
        placeholder = generation.placeholder
        subtrees = self.templates.feature_subtrees(placeholder)
        layout_source = self.templates.layout_file()

        collection_key = pluralize(entity)
        report = FeatureReport(
            entity=entity,
            project_root=root,
            collection_key=collection_key,
            route_url=route_url(entity, generation.url_prefix),
        )

        async def _instantiate(tree: Path, destination: Path) -> list[Path]:
            paths = await instantiate_to(
                tree, destination, entity, placeholder, generation.substitution_mode
            )
            for path in paths:
                print_created(path)
            return paths

        async def _layout() -> list[Path]:
            target = layout.layout_path(root)
            if await copy_file_if_missing(layout_source, target):
                console.print(f"File copied from {layout_source} to {target}")
                return [target]
            console.print(f"File already exists at {target}, skipping copy.")
            return []

        async def _fixtures() -> list[Path]:
            path = await register_fixtures(root, collection_key, DEFAULT_FIXTURES, layout)
            print_success(f"Added fake data for {collection_key} to {layout.fixture_store}!")
            return [path]

        async def _route() -> list[Path]:
            routes_file = layout.routes_path(root)
            if resume and routes_file.is_file() and is_registered(
                routes_file.read_text(encoding="utf-8"), entity, generation.url_prefix
            ):
                console.print(f"Route for {entity} already registered, skipping.")
                return []
            path = await register_route(root, entity, layout, generation)
            print_success(f"Route for {entity} added to {layout.routes_file}!")
            return [path]

        steps: dict[str, Callable[[], Awaitable[list[Path]]]] = {
            "handlers": lambda: _instantiate(subtrees["handlers"], layout.handlers_path(root)),
            "models": lambda: _instantiate(subtrees["models"], layout.models_path(root)),
            "page": lambda: _instantiate(subtrees["page"], layout.page_path(root, entity)),
            "layout": _layout,
            "fixtures": _fixtures,
            "route": _route,
        }

        for name in FEATURE_STEPS:
            if name in state.steps_completed:
                report.steps_skipped.append(name)
                continue
            written = await steps[name]()
            report.written.extend(written)
            report.steps_run.append(name)
            state.steps_completed.append(name)
            state.written.extend(str(p) for p in written)
            await state.save(state_path)

        print_success(f"CRUD structure for {entity} created successfully!")
        return report

    def _resume_state(
        self, root: Path, entity: str, state_path: Path
    ) -> FeatureState | None:
        """Load an unfinished generation record, if there is one.

        A missing or unreadable record is rebuilt from the artifacts on disk;
        ``None`` means nothing of *entity* exists yet.
        """
        state = None
        if state_path.is_file():
            try:
                state = FeatureState.load(state_path)
            except (json.JSONDecodeError, ValidationError):
                print_warning(f"Ignoring unreadable generation record at {state_path}")
        if state is None:
            state = self._state_from_artifacts(root, entity)
            if not state.steps_completed:
                return None
        if state.complete:
            raise DuplicateFeature(entity, self.config.layout.page_path(root, entity))
        console.print(
            f"Resuming {entity}: already completed {', '.join(state.steps_completed) or 'nothing'}"
        )
        return state

    def _state_from_artifacts(self, root: Path, entity: str) -> FeatureState:
        """Derive the finished steps of *entity* from what the project holds."""
        handler_names = self.templates.list_files(EXAMPLE_TREE, "core", "handlers")
        model_names = self.templates.list_files(EXAMPLE_TREE, "core", "models")
        artifacts = self.guard.inspect(root, entity, handler_names, model_names)

        done = {
            "handlers": bool(handler_names) and len(artifacts.handler_files) == len(handler_names),
            "models": bool(model_names) and len(artifacts.model_files) == len(model_names),
            "page": artifacts.page_dir,
            "layout": artifacts.any_present and self.config.layout.layout_path(root).is_file(),
            "fixtures": artifacts.fixtures_registered,
            "route": artifacts.route_registered,
        }
        return FeatureState(
            entity=entity, steps_completed=[step for step in FEATURE_STEPS if done[step]]
        )


# ---------------------------------------------------------------------------
# Project generation
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Creates a new project from the base template tree."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.templates = TemplateRepository(self.config.template_dir)

    async def create(
        self,
        project_name: str,
        parent_dir: str | Path,
        template: StarterTemplate | str = StarterTemplate.BLANK,
        *,
        skip_bootstrap: bool = False,
        skip_install: bool = False,
    ) -> Path:
        """Create *project_name* inside *parent_dir* and return its root.

        Steps:
            1. Bootstrap the Next.js app (external command).
            2. Install dependencies (external command).
            3. Merge the custom scripts into ``package.json``.
            4. Materialize the ``website`` tree over the project.
            5. For ``example`` projects, merge the example feature in and
               register its route and fixtures.
        """
        if not project_name or not project_name.strip():
            raise MissingArgument("Project name")
        template = StarterTemplate(template)
        layout = self.config.layout
        bootstrap = self.config.bootstrap

        # Resolve templates before running anything external.
        website_tree = self.templates.website()
        if template is StarterTemplate.EXAMPLE:
            example_pages = self.templates.example_pages()
            example_core = self.templates.example_core()

        parent = Path(parent_dir)
        project_root = parent / project_name

        print_step_header(1, "Create Next.js project")
        if skip_bootstrap:
            console.print("Skipping bootstrap.")
            await asyncio.to_thread(project_root.mkdir, parents=True, exist_ok=True)
        else:
            project_root = await create_next_app(project_name, parent, bootstrap)

        print_step_header(2, "Install dependencies")
        if skip_install or skip_bootstrap:
            console.print("Skipping dependency installation.")
        else:
            await install_dependencies(project_root, bootstrap)

        print_step_header(3, "Add custom scripts")
        if await merge_scripts(project_root, bootstrap.custom_scripts(layout), layout):
            print_success("Custom scripts added to package.json!")

        print_step_header(4, "Create project structure")
        await materialize(website_tree, project_root, MaterializeMode.REPLACE)

        if template is StarterTemplate.EXAMPLE:
            src_dir = project_root / "src"
            await materialize(
                example_pages, project_root / layout.pages_dir, MaterializeMode.MERGE
            )
            await materialize(example_core, src_dir, MaterializeMode.MERGE)

            placeholder = self.config.generation.placeholder
            await register_fixtures(
                project_root, pluralize(placeholder), DEFAULT_FIXTURES, layout
            )
            await register_route(
                project_root, placeholder, layout, self.config.generation
            )

        print_success("Project structure created!")
        return project_root
