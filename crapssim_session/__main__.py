"""
Module entrypoint:

  python -m crapssim_session run config.yaml --seed 7
"""
from __future__ import annotations

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
