# File: endpointgen/__main__.py
"""
endpointgen — Module entry point.

Allows running the resolver directly via::

    python -m endpointgen --declaration api.yaml --output symbols.json

This module simply delegates to the CLI entry point defined in ``endpointgen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from endpointgen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
