"""Module entry point: python -m pantera_gps ..."""

from __future__ import annotations

from pantera_gps.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
