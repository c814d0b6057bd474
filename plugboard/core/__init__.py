"""
Plugboard Core - Registry and global events.
"""

__all__ = []
