"""
OpenHunt - pattern extraction and JavaScript collection toolkit for bug bounty work.
"""

__version__ = "1.0.0"
