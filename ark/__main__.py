"""Run Ark: python -m ark <files> <backup_dir>"""

import sys

from ark.cli import main

if __name__ == "__main__":
    sys.exit(main())
