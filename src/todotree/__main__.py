"""Allow ``python -m todotree``."""
from __future__ import annotations

from todotree.cli.main import cli

if __name__ == "__main__":
    cli()
