"""Allow ``python -m picgallery``."""

import sys

from picgallery.cli import main

sys.exit(main())
