"""
Plugboard Plugin System - Plugin lifecycle and composition.

This module handles:
- Plugin and trait base classes
- Per-plugin loaders (dependencies, singletons, mocks)
- Trait composition
- Registry access mediators
"""

__all__ = []
