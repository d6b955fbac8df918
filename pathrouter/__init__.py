"""Trie-based HTTP path routing with capture variables, wildcards and priorities."""

__version__ = "0.1.0"

__all__ = ["encode", "matching_context", "pattern", "matcher", "router"]