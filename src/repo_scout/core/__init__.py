"""Core business logic: tree crawling, content decoding, discovery, and scoring.

This module is framework-agnostic. It has no dependency on MCP, FastMCP,
or any server framework, and never reads the environment: every setting is
passed in by the caller.
"""
