"""
Refresh the climate dataset from CLI.
"""

from __future__ import annotations

import sys

from climate_pipeline.cli import update_main


def main() -> int:
    return update_main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
