# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

import typer

from .clean import clean_command

app = typer.Typer(
    name="ws-cleanup",
    help="Remove build-workspace contents under configurable conditions.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main() -> None:
    """Remove build-workspace contents under configurable conditions."""


app.command(name="run")(clean_command)


__all__ = ["app"]
