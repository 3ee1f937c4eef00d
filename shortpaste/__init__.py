"""
Shortpaste - share text snippets under short, expiring links.
"""

__version__ = "1.0.0"
