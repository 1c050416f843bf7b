"""Duplicate-feature detection.

The refusal rule is deliberately shallow: a feature exists when its page
directory exists.  ``inspect`` looks at every artifact a generation writes;
the feature generator uses it to tell a finished feature from one left
behind by an interrupted run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from nextcrud.config import GenerationConfig, ProjectLayout
from nextcrud.errors import DuplicateFeature
from nextcrud.utils import load_json, pluralize

from .routes import is_registered
from .substitution import TokenSubstitution


@dataclass
class FeatureArtifacts:
    """Which artifacts of a feature are already present in a project."""

    entity: str
    page_dir: bool = False
    handler_files: list[Path] = field(default_factory=list)
    model_files: list[Path] = field(default_factory=list)
    route_registered: bool = False
    fixtures_registered: bool = False

    @property
    def any_present(self) -> bool:
        return bool(
            self.page_dir
            or self.handler_files
            or self.model_files
            or self.route_registered
            or self.fixtures_registered
        )


class ConflictGuard:
    """Gatekeeper consulted before a feature is generated."""

    def __init__(
        self,
        layout: ProjectLayout | None = None,
        generation: GenerationConfig | None = None,
    ) -> None:
        self.layout = layout or ProjectLayout()
        self.generation = generation or GenerationConfig()

    def exists(self, project_root: str | Path, entity: str) -> bool:
        """Return ``True`` if the feature's page directory already exists."""
        return self.layout.page_path(Path(project_root), entity).exists()

    def check(self, project_root: str | Path, entity: str) -> None:
        """Raise :class:`DuplicateFeature` if the feature already exists."""
        page = self.layout.page_path(Path(project_root), entity)
        if page.exists():
            raise DuplicateFeature(entity, page)

    def inspect(
        self,
        project_root: str | Path,
        entity: str,
        handler_templates: list[str] | None = None,
        model_templates: list[str] | None = None,
    ) -> FeatureArtifacts:
        """Report every artifact of *entity* already present in the project.

        Args:
            project_root: Target project root.
            entity: Feature name.
            handler_templates: Relative template file names under the
                handlers tree (placeholder form); their renamed versions are
                looked up in the project's handlers directory.
            model_templates: Same, for the models tree.
        """
        root = Path(project_root)
        substitution = TokenSubstitution(
            entity,
            self.generation.placeholder,
            self.generation.substitution_mode,
        )
        report = FeatureArtifacts(entity=entity, page_dir=self.exists(root, entity))

        for names, base, bucket in (
            (handler_templates or [], self.layout.handlers_path(root), report.handler_files),
            (model_templates or [], self.layout.models_path(root), report.model_files),
        ):
            for name in names:
                candidate = base / substitution.apply(name)
                if candidate.is_file():
                    bucket.append(candidate)

        routes_file = self.layout.routes_path(root)
        if routes_file.is_file():
            report.route_registered = is_registered(
                routes_file.read_text(encoding="utf-8"),
                entity,
                self.generation.url_prefix,
            )

        store_file = self.layout.fixture_store_path(root)
        if store_file.is_file():
            store = load_json(store_file)
            report.fixtures_registered = (
                isinstance(store, dict) and pluralize(entity) in store
            )

        return report
