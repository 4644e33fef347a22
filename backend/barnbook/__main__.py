"""Allows `python -m barnbook`, equivalent to the `barnbook-seed` script."""

import sys

from barnbook.cli import main

sys.exit(main())
