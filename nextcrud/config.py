"""nextcrud configuration.

Centralised, typed configuration for project creation and feature
generation. All settings use Pydantic v2 models so they can be validated at
construction time and serialised to/from JSON or environment variables
without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from nextcrud.errors import ConfigError

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


DEFAULT_DEPENDENCIES: list[str] = [
    "@hookform/resolvers@^3.9.0",
    "@radix-ui/react-avatar@^1.1.0",
    "@radix-ui/react-checkbox@^1.1.1",
    "@radix-ui/react-dialog@^1.1.1",
    "@radix-ui/react-dropdown-menu@^2.1.1",
    "@radix-ui/react-label@^2.1.0",
    "@radix-ui/react-menubar@^1.1.1",
    "@radix-ui/react-popover@^1.1.1",
    "@radix-ui/react-select@^2.1.1",
    "@radix-ui/react-separator@^1.1.0",
    "@radix-ui/react-slot@^1.1.0",
    "@radix-ui/react-toast@^1.2.1",
    "@radix-ui/react-tooltip@^1.1.2",
    "@tanstack/react-query@^5.51.23",
    "@tanstack/react-table@^8.20.1",
    "axios@^1.7.3",
    "class-variance-authority@^0.7.0",
    "clsx@^2.1.1",
    "dayjs@^1.11.12",
    "jotai@^2.9.2",
    "js-cookie@^3.0.5",
    "lucide-react@^0.426.0",
    "next@14.2.5",
    "react@^18.3.1",
    "react-dom@^18.3.1",
    "react-hook-form@^7.52.2",
    "react-icons@^5.2.1",
    "tailwind-merge@^2.4.0",
    "tailwindcss-animate@^1.0.7",
    "uuid@^10.0.0",
    "zod@^3.23.8",
]

DEFAULT_DEV_DEPENDENCIES: list[str] = [
    "@types/js-cookie@^3.0.6",
    "@types/node@^20.14.14",
    "@types/react@^18.3.3",
    "@types/react-dom@^18.3.0",
    "@types/uuid@^10.0.0",
    "eslint@^8",
    "eslint-config-next@14.2.5",
    "eslint-plugin-prettier@^5.2.1",
    "globals@^15.9.0",
    "json-server@^1.0.0-beta.1",
    "postcss@^8.4.41",
    "prettier@^3.3.3",
    "tailwindcss@^3.4.9",
    "typescript@^5.5.4",
    "typescript-eslint@^8.0.1",
]

CREATE_APP_FLAGS: list[str] = [
    "--typescript",
    "--turbo",
    "--eslint",
    "--tailwind",
    "--src-dir",
    "--app",
    "--skip-install",
    "--use-bun",
    "--empty",
    "--no-import-alias",
]


class ProjectLayout(BaseModel):
    """Fixed relative paths inside a generated project.

    The generators depend on these paths existing verbatim; they are never
    discovered dynamically.
    """

    routes_file: str = Field(default="src/routes.tsx")
    fixture_store: str = Field(default="mock/server.json")
    pages_dir: str = Field(default="src/app/v1")
    handlers_dir: str = Field(default="src/core/handlers")
    models_dir: str = Field(default="src/core/models")
    layout_file: str = Field(default="src/app/v1/layout.tsx")
    manifest_file: str = Field(default="package.json")

    def routes_path(self, root: Path) -> Path:
        return Path(root) / self.routes_file

    def fixture_store_path(self, root: Path) -> Path:
        return Path(root) / self.fixture_store

    def page_path(self, root: Path, entity: str) -> Path:
        """Canonical location of a feature: ``src/app/v1/<entity>``."""
        return Path(root) / self.pages_dir / entity

    def handlers_path(self, root: Path) -> Path:
        return Path(root) / self.handlers_dir

    def models_path(self, root: Path) -> Path:
        return Path(root) / self.models_dir

    def layout_path(self, root: Path) -> Path:
        return Path(root) / self.layout_file

    def manifest_path(self, root: Path) -> Path:
        return Path(root) / self.manifest_file


class BootstrapConfig(BaseModel):
    """Commands used to create the base Next.js app and install packages."""

    package_runner: str = Field(default="bunx")
    package_manager: str = Field(default="bun")
    create_app_package: str = Field(default="create-next-app@latest")
    create_app_flags: list[str] = Field(default_factory=lambda: list(CREATE_APP_FLAGS))
    dependencies: list[str] = Field(default_factory=lambda: list(DEFAULT_DEPENDENCIES))
    dev_dependencies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DEV_DEPENDENCIES)
    )
    mock_server_port: int = Field(default=3333, ge=1, le=65535)

    def create_app_command(self, project_name: str) -> list[str]:
        """Return the argv that bootstraps a Next.js app named *project_name*."""
        return [
            self.package_runner,
            self.create_app_package,
            project_name,
            *self.create_app_flags,
        ]

    def install_command(self, dev: bool = False) -> list[str]:
        """Return the argv that installs the (dev) dependency list."""
        packages = self.dev_dependencies if dev else self.dependencies
        cmd = [self.package_manager, "add"]
        if dev:
            cmd.append("--dev")
        return cmd + list(packages)

    def custom_scripts(self, layout: ProjectLayout) -> dict[str, str]:
        """Scripts merged into the generated ``package.json``."""
        return {
            "server": (
                f"json-server --watch ./{layout.fixture_store} "
                f"--port {self.mock_server_port}"
            ),
        }


class GenerationConfig(BaseModel):
    """Knobs for token substitution and route registration."""

    placeholder: str = Field(default="sample", min_length=1)
    substitution_mode: Literal["literal", "identifier"] = Field(default="literal")
    url_prefix: str = Field(default="/v1")
    label_prefix: str = Field(default="CRUD")
    route_icon: str = Field(default="<TbTemplate size={24} />")
    route_anchor: str = Field(default="];")


class Config(BaseModel):
    """Global nextcrud configuration.

    Instances are typically created once by the CLI entry point and then
    passed through the generators.
    """

    template_dir: Path = Field(default=DEFAULT_TEMPLATE_DIR)
    state_dir: str = Field(default=".nextcrud")
    layout: ProjectLayout = Field(default_factory=ProjectLayout)
    bootstrap: BootstrapConfig = Field(default_factory=BootstrapConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def state_path(self, project_root: Path) -> Path:
        """Root of the ``.nextcrud/`` metadata directory inside a project."""
        return Path(project_root) / self.state_dir

    def feature_state_path(self, project_root: Path, entity: str) -> Path:
        """Path to the persisted generation record for *entity*."""
        return self.state_path(project_root) / "features" / f"{entity}.json"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a configuration from a JSON file.

        Raises:
            ConfigError: If the file cannot be read or does not validate.
        """
        try:
            raw = Path(path).read_text(encoding="utf-8")
            return cls.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            raise ConfigError(f"Cannot load configuration from {path}: {exc}", path=path) from exc

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            NEXTCRUD_TEMPLATE_DIR, NEXTCRUD_PACKAGE_MANAGER,
            NEXTCRUD_PACKAGE_RUNNER, NEXTCRUD_MOCK_PORT,
            NEXTCRUD_SUBSTITUTION_MODE, NEXTCRUD_URL_PREFIX.

        Raises:
            ConfigError: If a variable holds an invalid value.
        """
        bootstrap_kwargs: dict[str, Any] = {}
        if os.environ.get("NEXTCRUD_PACKAGE_MANAGER"):
            bootstrap_kwargs["package_manager"] = os.environ["NEXTCRUD_PACKAGE_MANAGER"]
        if os.environ.get("NEXTCRUD_PACKAGE_RUNNER"):
            bootstrap_kwargs["package_runner"] = os.environ["NEXTCRUD_PACKAGE_RUNNER"]
        if os.environ.get("NEXTCRUD_MOCK_PORT"):
            bootstrap_kwargs["mock_server_port"] = os.environ["NEXTCRUD_MOCK_PORT"]

        generation_kwargs: dict[str, Any] = {}
        if os.environ.get("NEXTCRUD_SUBSTITUTION_MODE"):
            generation_kwargs["substitution_mode"] = os.environ["NEXTCRUD_SUBSTITUTION_MODE"]
        if os.environ.get("NEXTCRUD_URL_PREFIX"):
            generation_kwargs["url_prefix"] = os.environ["NEXTCRUD_URL_PREFIX"]

        try:
            kwargs: dict[str, Any] = {
                "bootstrap": BootstrapConfig(**bootstrap_kwargs),
                "generation": GenerationConfig(**generation_kwargs),
            }
        except ValidationError as exc:
            raise ConfigError(f"Invalid NEXTCRUD_* environment: {exc}") from exc
        if os.environ.get("NEXTCRUD_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["NEXTCRUD_TEMPLATE_DIR"])
        return cls(**kwargs)
