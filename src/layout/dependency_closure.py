"""Transitive dependency closure for bundle graphs.

This module expands direct bundle dependencies into full closures.
Traversal is depth-first preorder with a visited set per start bundle,
so cyclic or self-referential input terminates without duplicates.
"""

from __future__ import annotations

from typing import Mapping, Sequence


def expand_dependencies(start: str, edges: Mapping[str, Sequence[str]]) -> tuple[str, ...]:
    """Compute the dependency closure of one bundle.

    Args:
        start: Name of the bundle to expand.
        edges: Direct dependency names keyed by bundle name. Names with no
            entry are treated as leaves.

    Returns:
        Reachable bundle names in first-discovery order, excluding ``start``.
    """
    visited = {start}
    closure: list[str] = []
    stack = list(reversed(edges.get(start, ())))
    while stack:
        name = stack.pop()
        if name in visited:
            continue
        visited.add(name)
        closure.append(name)
        stack.extend(reversed(edges.get(name, ())))
    return tuple(closure)


def build_dependency_closures(edges: Mapping[str, Sequence[str]]) -> dict[str, tuple[str, ...]]:
    """Compute the dependency closure of every bundle in ``edges``.

    Args:
        edges: Direct dependency names keyed by bundle name.

    Returns:
        Closure per bundle name, in the iteration order of ``edges``.
    """
    return {name: expand_dependencies(name, edges) for name in edges}
