"""
Provides the same behaviour as the ``zipstage`` console script:
``python -m zipstage payload games.zip``.
"""
from __future__ import annotations

from .cli import cli

if __name__ == "__main__":
    cli()
