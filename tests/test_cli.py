"""Tests for the nextcrud command line (nextcrud.cli)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from nextcrud.cli import build_parser, main

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _templates_env(monkeypatch: pytest.MonkeyPatch, template_root: Path):
    """Point the CLI at the test template root through the environment."""
    monkeypatch.setenv("NEXTCRUD_TEMPLATE_DIR", str(template_root))
    monkeypatch.delenv("NEXTCRUD_SUBSTITUTION_MODE", raising=False)


class TestParser:
    def test_new_crud_arguments(self, tmp_path: Path):
        args = build_parser().parse_args(
            ["new-crud", "order", "-p", str(tmp_path), "--resume", "--substitution", "identifier"]
        )
        assert args.command == "new-crud"
        assert args.entity == "order"
        assert args.project_dir == tmp_path
        assert args.resume is True
        assert args.substitution == "identifier"

    def test_new_project_defaults(self):
        args = build_parser().parse_args(["new-project", "my-app"])
        assert args.name == "my-app"
        assert args.template is None
        assert args.output == Path(".")
        assert args.skip_bootstrap is False

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_rejects_unknown_template(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["new-project", "my-app", "--template", "fancy"])


class TestNewCrud:
    def test_success(self, scaffolded_project: Path):
        code = main(["new-crud", "order", "--project-dir", str(scaffolded_project)])

        assert code == 0
        assert (scaffolded_project / "src" / "app" / "v1" / "order" / "page.tsx").is_file()

    def test_duplicate_exit_code(self, scaffolded_project: Path):
        assert main(["new-crud", "order", "-p", str(scaffolded_project)]) == 0
        with patch("nextcrud.cli.print_error") as print_error:
            assert main(["new-crud", "order", "-p", str(scaffolded_project)]) == 1
        message = print_error.call_args[0][0]
        assert 'A page named "order" already exists' in message

    def test_missing_entity(self, scaffolded_project: Path):
        with patch("nextcrud.cli.print_error") as print_error:
            assert main(["new-crud", "-p", str(scaffolded_project)]) == 1
        assert "Entity name is required." in print_error.call_args[0][0]

    def test_substitution_flag(self, scaffolded_project: Path):
        code = main(
            ["new-crud", "order", "-p", str(scaffolded_project), "--substitution", "identifier"]
        )
        assert code == 0
        handler = scaffolded_project / "src" / "core" / "handlers" / "orderHandler.ts"
        assert "listOrders" in handler.read_text("utf-8")

    def test_missing_store_exit_code(self, scaffolded_project: Path):
        (scaffolded_project / "mock" / "server.json").unlink()
        assert main(["new-crud", "order", "-p", str(scaffolded_project)]) == 1

    def test_resume_flag(self, scaffolded_project: Path):
        store = scaffolded_project / "mock" / "server.json"
        store.unlink()
        assert main(["new-crud", "order", "-p", str(scaffolded_project)]) == 1

        store.write_text("{}", encoding="utf-8")
        assert main(["new-crud", "order", "-p", str(scaffolded_project), "--resume"]) == 0
        assert "orders" in json.loads(store.read_text("utf-8"))

    def test_missing_config_file(self, tmp_path: Path, scaffolded_project: Path):
        missing = tmp_path / "nope.json"
        with patch("nextcrud.cli.print_error") as print_error:
            code = main(["--config", str(missing), "new-crud", "order", "-p", str(scaffolded_project)])
        assert code == 1
        assert str(missing) in print_error.call_args[0][0]
        assert not (scaffolded_project / "src" / "app" / "v1" / "order").exists()

    def test_invalid_port_env(self, monkeypatch: pytest.MonkeyPatch, scaffolded_project: Path):
        monkeypatch.setenv("NEXTCRUD_MOCK_PORT", "not-a-port")
        with patch("nextcrud.cli.print_error") as print_error:
            assert main(["new-crud", "order", "-p", str(scaffolded_project)]) == 1
        assert "NEXTCRUD_" in print_error.call_args[0][0]

    def test_partial_duplicate_mentions_resume(self, scaffolded_project: Path):
        (scaffolded_project / "mock" / "server.json").unlink()
        assert main(["new-crud", "order", "-p", str(scaffolded_project)]) == 1
        with patch("nextcrud.cli.print_error") as print_error:
            assert main(["new-crud", "order", "-p", str(scaffolded_project)]) == 1
        assert "--resume" in print_error.call_args[0][0]

    def test_quoted_entity_rejected(self, scaffolded_project: Path):
        with patch("nextcrud.cli.print_error") as print_error:
            assert main(["new-crud", 'or"der', "-p", str(scaffolded_project)]) == 1
        assert "quotes" in print_error.call_args[0][0]


class TestNewProject:
    def test_blank_project(self, tmp_path: Path):
        out = tmp_path / "out"
        out.mkdir()
        code = main(
            ["new-project", "my-app", "--template", "blank", "--skip-bootstrap", "-o", str(out)]
        )
        assert code == 0
        assert (out / "my-app" / "src" / "routes.tsx").is_file()

    def test_prompts_for_template(self, tmp_path: Path):
        with patch("nextcrud.cli.Prompt.ask", return_value="example") as ask:
            code = main(["new-project", "my-app", "--skip-bootstrap", "-o", str(tmp_path)])
        assert code == 0
        ask.assert_called_once()
        assert (tmp_path / "my-app" / "src" / "app" / "v1" / "sample").is_dir()

    def test_missing_name(self, tmp_path: Path):
        with patch("nextcrud.cli.print_error") as print_error:
            assert main(["new-project", "-o", str(tmp_path)]) == 1
        assert "Project name is required." in print_error.call_args[0][0]

    def test_bootstrap_failure_exit_code(self, tmp_path: Path):
        with patch(
            "nextcrud.bootstrap.run_command",
            new_callable=AsyncMock,
            return_value=(1, "", "boom"),
        ):
            code = main(["new-project", "my-app", "--template", "blank", "-o", str(tmp_path)])
        assert code == 1

    def test_corrupt_manifest_exit_code(self, tmp_path: Path):
        root = tmp_path / "shop"
        root.mkdir()
        (root / "package.json").write_text("{not json", encoding="utf-8")
        with patch("nextcrud.cli.print_error") as print_error:
            code = main(["new-project", "shop", "--template", "blank", "--skip-bootstrap", "-o", str(tmp_path)])
        assert code == 1
        assert "package.json" in print_error.call_args[0][0]

    def test_missing_output_dir(self, tmp_path: Path):
        missing = tmp_path / "missing-dir"
        with patch(
            "nextcrud.bootstrap.run_command", new_callable=AsyncMock
        ) as run_command, patch("nextcrud.cli.print_error") as print_error:
            code = main(["new-project", "my-app", "--template", "blank", "-o", str(missing)])
        assert code == 1
        message = print_error.call_args[0][0]
        assert str(missing) in message
        assert "Command not found" not in message
        run_command.assert_not_awaited()
