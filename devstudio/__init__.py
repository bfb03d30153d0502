"""devstudio: workspace engine for a browser-hosted code editor.

``main`` runs the command-line front door. The path table, local-folder
bridge, and session runtime are imported from their own submodules.
"""

from __future__ import annotations

__version__ = "0.1.0"


def main(argv: list[str] | None = None) -> int:
    """Run the CLI; the import is deferred so ``import devstudio`` stays cheap."""
    from .cli import main as run_cli

    return run_cli(argv)


__all__ = ["__version__", "main"]
