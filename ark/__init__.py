"""
Ark - dated snapshot archival with tiered retention.

Archives a set of files into one zip per calendar day and rotates old
snapshots using a daily/weekly/monthly/yearly policy.
"""

try:
    from importlib.metadata import version

    __version__ = version("ark")
except Exception:
    __version__ = "0.0.0"  # Fallback for development
