"""
Entry point for running the rebarkit CLI as a module.

Usage: python -m rebarkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
