"""Entry point for ``python -m character_browser``."""

import sys

from character_browser.cli import main

sys.exit(main())
