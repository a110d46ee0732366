"""Repo Scout MCP Server.

Ask your AI about the businesses behind GitHub: crawl repository trees, read
files, discover organizations by industry or technology, and score how
commercial a repository looks.
"""

__version__ = "0.1.0"
