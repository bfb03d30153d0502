"""Module entrypoint for ``python -m devstudio``.

All argument parsing and workspace setup happen in ``devstudio.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
