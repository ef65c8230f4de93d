"""Invoke tasks for local development.

Every task shells out to `uv` so the virtual environment, test run and lint
configuration match CI.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence

from invoke import Collection, Context, task


def _uv(ctx: Context, args: Sequence[str], *, echo: bool = True) -> None:
    """Run `uv` with ``args`` in a pseudo-terminal.

    Args:
        ctx: Invoke execution context.
        args: Arguments placed after the `uv` executable.
        echo: Whether to print the command before running it.
    """
    ctx.run(shlex.join(("uv", *args)), echo=echo, pty=True)


@task
def sync(ctx: Context) -> None:
    """Install the project together with the dev extra."""
    _uv(ctx, ["sync", "--extra", "dev"])


@task(
    help={
        "k": "pytest -k expression for test selection.",
        "path": "Path or module to test (defaults to tests/).",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests") -> None:
    """Run the pytest suite.

    Args:
        ctx: Invoke execution context.
        k: `pytest -k` expression to select tests.
        path: Target path for pytest discovery.
    """
    args = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    args.append(path)
    _uv(ctx, args)


@task(help={"fix": "Apply Ruff auto-fixes."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint rules with Ruff."""
    _uv(ctx, ["run", "ruff", "format", "--check", "src", "tests"])
    args = ["run", "ruff", "check", "src", "tests"]
    if fix:
        args.append("--fix")
    _uv(ctx, args)


@task
def typecheck(ctx: Context) -> None:
    """Type-check the package with MyPy."""
    _uv(ctx, ["run", "mypy", "src"])


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks and tests in CI order."""
    ctx.invoke(lint)
    ctx.invoke(typecheck)
    ctx.invoke(tests)


namespace = Collection(sync, tests, lint, typecheck, ci)
