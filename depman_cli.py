# depman_cli.py
"""
Thin CLI shim for depman.

Examples:
  $ python -m depman_cli get ./my_app
  $ python -m depman_cli upgrade ./my_app http
  $ python -m depman_cli run -- --version
"""

from __future__ import annotations


def main() -> int:
    from depman.core import main as core_main  # local import to keep the shim lightweight
    return core_main()


if __name__ == "__main__":
    raise SystemExit(main())
