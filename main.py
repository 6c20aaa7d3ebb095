"""
Multi-Display Face Tracking - Main Entry Point

Launch the display coordination service.
"""

import sys

from src.coordinator.main import run


def main():
    """Launch the coordination service."""
    argv = sys.argv[1:] or ["--serve"]
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
