"""
PDF Scanner - Core Package

Searches directory trees for documents containing a literal phrase and
optionally bundles the matching files into a ZIP archive.
"""

__version__ = "0.1.0"
__author__ = "PDF Scanner Developers"
