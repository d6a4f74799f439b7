"""
gitsmart: heuristic reporting on git repositories.

The package scrapes the output of the git CLI into typed records and
derives summaries, rankings, and review flags from them.
"""

__version__ = "0.1.0"
