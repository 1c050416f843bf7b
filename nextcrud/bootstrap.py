"""External project bootstrap.

Thin wrappers around the package tooling that creates the base Next.js
application and installs its dependencies.  Both commands inherit the
terminal so their own progress output stays visible, and both are awaited
to completion; a non-zero exit raises :class:`BootstrapError`.
"""

from __future__ import annotations

from pathlib import Path

from nextcrud.config import BootstrapConfig
from nextcrud.utils import console, print_success, run_command


class BootstrapError(Exception):
    """Raised when an external bootstrap or install command fails."""

    def __init__(self, message: str, command: str = "", returncode: int = 0):
        self.command = command
        self.returncode = returncode
        super().__init__(message)


async def _run_checked(cmd: list[str], cwd: Path) -> None:
    cmd_str = " ".join(cmd)
    if not cwd.is_dir():
        raise BootstrapError(f"Working directory does not exist: {cwd}", command=cmd_str)
    try:
        returncode, _, stderr = await run_command(cmd, cwd=cwd, capture=False)
    except FileNotFoundError as exc:
        raise BootstrapError(
            f"Command not found: {cmd[0]}", command=cmd_str, returncode=127
        ) from exc
    if returncode != 0:
        raise BootstrapError(
            f"Command failed (exit {returncode}): {cmd_str}"
            + (f"\n{stderr}" if stderr else ""),
            command=cmd_str,
            returncode=returncode,
        )


async def create_next_app(
    project_name: str,
    parent_dir: str | Path,
    config: BootstrapConfig | None = None,
) -> Path:
    """Create a Next.js application named *project_name* inside *parent_dir*.

    Returns:
        Path to the new project root.
    """
    config = config or BootstrapConfig()
    parent = Path(parent_dir)
    console.print(f"Creating Next.JS project: {project_name}")
    await _run_checked(config.create_app_command(project_name), cwd=parent)
    return parent / project_name


async def install_dependencies(
    project_path: str | Path,
    config: BootstrapConfig | None = None,
) -> None:
    """Install the runtime and development dependency lists."""
    config = config or BootstrapConfig()
    project = Path(project_path)

    console.print("Installing custom dependencies...")
    await _run_checked(config.install_command(), cwd=project)
    print_success("Dependencies installed successfully!")

    console.print("Installing development dependencies...")
    await _run_checked(config.install_command(dev=True), cwd=project)
    print_success("Development dependencies installed successfully!")
