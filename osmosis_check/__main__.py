# Allows the package to be run as a script using `python -m osmosis_check`

from __future__ import annotations

import sys

from osmosis_check.cli import main

if __name__ == "__main__":
    sys.exit(main())
