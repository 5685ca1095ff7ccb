"""Layout document storage layer.

This package encodes layout graphs as key-referenced documents and
persists them as JSON or YAML files next to build output.
"""
