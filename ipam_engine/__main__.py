"""Allow ``python -m ipam_engine``."""

import sys

from ipam_engine.cli.cli import main

sys.exit(main())
