"""Stale git branch cleanup tool.

Features:
- List local branches whose last commit is older than a day threshold
- Filter to merged branches or to branches you authored
- Show merge status and divergence from main in a table
- Interactive or bulk deletion guarded by a typed confirmation
"""

__version__ = "1.0.0"
