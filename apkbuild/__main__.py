"""Allow running as ``python -m apkbuild``."""

import sys

from apkbuild.cli import main

sys.exit(main())
