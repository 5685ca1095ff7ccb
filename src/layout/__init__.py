"""Layout graph model and reader surfaces.

This package holds the build layout entity graph, its lookup index,
dependency closure, traversal, and summary helpers.
"""
