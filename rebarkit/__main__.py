"""
Entry point for running rebarkit as a module.

Usage: python -m rebarkit [command] [options]
"""

from rebarkit.cli.parser import main

if __name__ == "__main__":
    main()
