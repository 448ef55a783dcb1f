"""
Starfall: server-authoritative progression engine for a space RPG.

Resolves combat rewards, leveling, inventory grants and equipment changes
against player records held by an external title backend.
"""

__version__ = "0.1.0"
