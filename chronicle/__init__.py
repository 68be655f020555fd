"""
Chronicle - embeddable version control for structured data

Tracks snapshots of tree-shaped data as commits on named branches, and
compares, merges, rebases and syncs independent in-memory repositories.
"""

__version__ = "0.1.0"

# Configuration is available at top level for convenience
from chronicle.config import config
from chronicle.version_control import Repository, compute_diff

__all__ = ["config", "Repository", "compute_diff", "__version__"]
