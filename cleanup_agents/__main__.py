"""Entry point for `python -m cleanup_agents`."""
import sys

from .mac_cleanup import main

if __name__ == "__main__":
    sys.exit(main())
