"""CLI entry point for the dtsfmt package.

Usage:
    python -m dtsfmt my_board.keymap
    python -m dtsfmt --check --emit stdout boards/
"""

from .cli import main

if __name__ == "__main__":
    main()
