"""
Verify the persisted climate dataset from CLI.
"""

from __future__ import annotations

import sys

from climate_pipeline.cli import verify_main


def main() -> int:
    return verify_main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
