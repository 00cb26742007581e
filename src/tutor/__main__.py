"""
Entry point for running the tutor as a module.

Usage:
    python -m src.tutor solve -a 1 -b -3 -c 2
    python -m src.tutor practice
    python -m src.tutor --help
"""
from .cli import main

if __name__ == "__main__":
    main()
