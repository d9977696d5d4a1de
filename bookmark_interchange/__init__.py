"""
Bookmark Interchange Engine

Imports browser bookmark exports (Netscape bookmark HTML or a JSON tree) into
per-user categories and links, and exports them back to bookmark HTML that
browsers can import.
"""

__version__ = "1.0.0"
__author__ = ""
