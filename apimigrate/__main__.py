"""Allow ``python -m apimigrate``."""

import sys

from .cli import main

sys.exit(main())
