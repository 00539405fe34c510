"""Allow ``python -m raccoon``."""

import sys

from raccoon.cli import main

sys.exit(main())
