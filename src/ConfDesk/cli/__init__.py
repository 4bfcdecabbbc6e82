"""CLI package for ConfDesk command orchestration.

Click definitions live in ``ui``, session assembly in ``factories``,
execution and error handling in ``runner`` and the command logic in
``commands``.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from ConfDesk.cli.runner import CommandRunner
from ConfDesk.cli.ui import cli


def main() -> None:
    """Run ConfDesk CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
