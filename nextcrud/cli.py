"""nextcrud command line.

Usage::

    nextcrud new-project my-app --template example
    nextcrud new-crud customer --project-dir ./my-app
"""

from __future__ import annotations

import argparse
import asyncio
import time
from pathlib import Path

from rich.prompt import Prompt

from nextcrud.bootstrap import BootstrapError
from nextcrud.config import Config
from nextcrud.errors import MissingArgument, ScaffoldError
from nextcrud.scaffolder.generator import FeatureGenerator, ProjectGenerator, StarterTemplate
from nextcrud.utils import format_duration, print_error, print_summary_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nextcrud",
        description="Scaffold Next.js apps and generate CRUD features",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  nextcrud new-project my-app\n"
            "  nextcrud new-project my-app --template example --skip-install\n"
            "  nextcrud new-crud customer --project-dir ./my-app\n"
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (defaults come from NEXTCRUD_* environment variables)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    project = sub.add_parser("new-project", help="Create a new Next.js project")
    project.add_argument("name", nargs="?", default=None, help="Project name")
    project.add_argument(
        "--template",
        choices=[t.value for t in StarterTemplate],
        default=None,
        help="Starter content (prompted for when omitted)",
    )
    project.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("."),
        help="Directory the project folder is created in (default: .)",
    )
    project.add_argument(
        "--skip-bootstrap",
        action="store_true",
        help="Do not run create-next-app; lay the templates over an existing folder",
    )
    project.add_argument(
        "--skip-install",
        action="store_true",
        help="Do not install dependencies",
    )

    crud = sub.add_parser("new-crud", help="Add a CRUD feature to a project")
    crud.add_argument("entity", nargs="?", default=None, help="Entity name, e.g. customer")
    crud.add_argument(
        "--project-dir", "-p",
        type=Path,
        default=None,
        help="Project root (default: current directory)",
    )
    crud.add_argument(
        "--resume",
        action="store_true",
        help="Finish a previous generation of this entity that stopped part-way",
    )
    crud.add_argument(
        "--substitution",
        choices=["literal", "identifier"],
        default=None,
        help="Placeholder matching mode (default: literal)",
    )
    return parser


def _load_config(path: Path | None) -> Config:
    if path is not None:
        return Config.load(path)
    return Config.from_env()


async def _new_project(args: argparse.Namespace, config: Config) -> None:
    if not args.name:
        raise MissingArgument("Project name")
    template = args.template or Prompt.ask(
        "Choose a template",
        choices=[t.value for t in StarterTemplate],
        default=StarterTemplate.BLANK.value,
    )
    generator = ProjectGenerator(config)
    root = await generator.create(
        args.name,
        args.output,
        template,
        skip_bootstrap=args.skip_bootstrap,
        skip_install=args.skip_install,
    )
    print_summary_table(
        {"Project": str(root), "Template": template},
        title="Project created",
    )


async def _new_crud(args: argparse.Namespace, config: Config) -> None:
    if not args.entity:
        raise MissingArgument("Entity name")
    if args.substitution:
        config.generation.substitution_mode = args.substitution
    project_dir = args.project_dir or Path.cwd()
    generator = FeatureGenerator(config)
    report = await generator.add(project_dir, args.entity, resume=args.resume)
    print_summary_table(
        {
            "Entity": report.entity,
            "Route": report.route_url,
            "Fixtures": report.collection_key,
            "Files written": str(len(report.written)),
            "Steps skipped": ", ".join(report.steps_skipped) or "-",
        },
        title="CRUD generated",
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    started = time.monotonic()

    try:
        config = _load_config(args.config)
        if args.command == "new-project":
            asyncio.run(_new_project(args, config))
        else:
            asyncio.run(_new_crud(args, config))
    except ScaffoldError as exc:
        print_error(f"Error: {exc}")
        return 1
    except BootstrapError as exc:
        print_error(f"Error: {exc}")
        return 1
    except (OSError, ValueError) as exc:
        print_error(f"Error: {exc}")
        return 1

    print_summary_table({"Elapsed": format_duration(time.monotonic() - started)}, title="Done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
