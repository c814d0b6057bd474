"""
Built-in traits.
"""

__all__ = []
