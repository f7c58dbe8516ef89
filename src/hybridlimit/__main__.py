"""Module entry point for ``python -m hybridlimit`` and the ``hybridlimit`` script."""

from __future__ import annotations

from .cli import app


def main() -> None:
    app(prog_name="hybridlimit")


if __name__ == "__main__":
    main()
