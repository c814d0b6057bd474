"""
Plugboard Utilities - Built-in utility plugins.

This module contains:
- JsonParser: Lenient JSON-like parser used for data configuration
"""

__all__ = []
