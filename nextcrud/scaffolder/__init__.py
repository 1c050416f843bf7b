"""nextcrud scaffolder -- template-driven project and feature generation.

Materializes template trees into a target project, rewrites the
placeholder token (``sample``/``Sample``) into a concrete entity name, and
registers new features in the project's route list and mock data store.

Quick usage::

    from nextcrud.scaffolder import FeatureGenerator

    generator = FeatureGenerator()
    report = await generator.add("/path/to/project", "order")
"""

from nextcrud.scaffolder.generator import (
    FeatureGenerator,
    FeatureReport,
    FeatureState,
    ProjectGenerator,
    StarterTemplate,
)
from nextcrud.scaffolder.guard import ConflictGuard, FeatureArtifacts
from nextcrud.scaffolder.materializer import MaterializeMode, materialize
from nextcrud.scaffolder.mock_store import DEFAULT_FIXTURES, FixtureRecord, register_fixtures
from nextcrud.scaffolder.routes import register_route
from nextcrud.scaffolder.substitution import TokenSubstitution, instantiate, instantiate_to
from nextcrud.scaffolder.templates import TemplateRepository

__all__ = [
    "ConflictGuard",
    "DEFAULT_FIXTURES",
    "FeatureArtifacts",
    "FeatureGenerator",
    "FeatureReport",
    "FeatureState",
    "FixtureRecord",
    "MaterializeMode",
    "ProjectGenerator",
    "StarterTemplate",
    "TemplateRepository",
    "TokenSubstitution",
    "instantiate",
    "instantiate_to",
    "materialize",
    "register_fixtures",
    "register_route",
]
