"""Entry point for running spacetraveling as a module.

Usage:
    python -m spacetraveling serve --mock
"""

import sys

from .main import main

sys.exit(main())
