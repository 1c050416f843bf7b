"""Shared pytest fixtures for the nextcrud test suite.

Provides reusable fixtures for:
- Temporary project directories
- A small template root laid out like the bundled one
- A project that looks like the output of ``new-project``
- Mock subprocess helpers for the bootstrap commands
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from nextcrud.config import Config


ROUTES_TSX = textwrap.dedent(
    """\
    import { TbHome, TbTemplate } from "react-icons/tb";

    export const routes = [
      {
        icon: <TbHome size={24} />,
        label: "Home",
        url: "/",
      },
    ];
    """
)

PACKAGE_JSON = {
    "name": "test-project",
    "version": "0.1.0",
    "private": True,
    "scripts": {"dev": "next dev --turbo", "build": "next build"},
}


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Empty temporary directory standing in for a project root."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """A minimal template root with the same shape as the bundled one."""
    root = tmp_path / "templates"
    files = {
        "website/src/routes.tsx": ROUTES_TSX,
        "website/mock/server.json": "{}\n",
        "website/src/app/page.tsx": "export default function Home() { return null; }\n",
        "example/core/handlers/sampleHandler.ts": (
            'export const listSamples = () => api.get("/samples");\n'
        ),
        "example/core/models/sampleModel.ts": (
            "export type Sample = { id: string };\n"
        ),
        "example/v1/sample/page.tsx": (
            "export default function SamplePage() { return <h1>Sample</h1>; }\n"
        ),
        "example/v1/sample/components/SampleTable.tsx": (
            "export const SampleTable = () => null; // sample rows\n"
        ),
        "example/v1/layout.tsx": (
            "export default function Layout({ children }) { return children; }\n"
        ),
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def config(template_root: Path) -> Config:
    """Default configuration pointed at the ``template_root`` fixture."""
    return Config(template_dir=template_root)


@pytest.fixture
def scaffolded_project(tmp_project_dir: Path) -> Path:
    """A project as left behind by ``new-project`` with the blank template."""
    (tmp_project_dir / "src" / "app" / "v1").mkdir(parents=True)
    (tmp_project_dir / "src" / "routes.tsx").write_text(ROUTES_TSX, encoding="utf-8")
    (tmp_project_dir / "mock").mkdir()
    (tmp_project_dir / "mock" / "server.json").write_text("{}", encoding="utf-8")
    (tmp_project_dir / "package.json").write_text(
        json.dumps(PACKAGE_JSON, indent=2), encoding="utf-8"
    )
    return tmp_project_dir


def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Map every file under *root* to its bytes, for before/after comparison."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def tree_snapshot():
    """Expose :func:`snapshot_tree` to tests."""
    return snapshot_tree


# ---------------------------------------------------------------------------
# Subprocess mocking
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_run_command():
    """Patch ``run_command`` in the bootstrap module to succeed instantly."""
    with patch(
        "nextcrud.bootstrap.run_command",
        new_callable=AsyncMock,
        return_value=(0, "", ""),
    ) as mocked:
        yield mocked
