#!/usr/bin/env python3
"""
Main entry point for filtergen.

Usage:
    python main.py generate filters.yaml -o mailFilters.xml
    python main.py show filters.yaml
    python main.py check filters.yaml

See --help for available options.
"""

from filtergen.cli import main


if __name__ == "__main__":
    main()
