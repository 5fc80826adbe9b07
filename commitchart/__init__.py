"""
commitchart - weekly commit activity charts for a fixed set of repositories

Captures each repository's commit history once, caches it on disk, and renders
a weekly-bucketed activity chart per repository on every run.
"""

__version__ = "0.1.0"
