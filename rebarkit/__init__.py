"""
rebarkit - fetch, verify and install rebar build tools.
"""

try:
    from importlib.metadata import version

    __version__ = version("rebarkit")
except Exception:
    __version__ = "0.1.0"

__all__ = ["__version__"]
