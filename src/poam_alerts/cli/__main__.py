"""
Allow running poamctl as a module: python -m poam_alerts.cli
"""

import sys
from .poamctl import main

if __name__ == "__main__":
    sys.exit(main())
