"""Module to run the launcher from a source checkout."""

import sys

from app_bootstrap.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
