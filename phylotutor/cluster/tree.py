"""Rooted binary cluster tree produced by UPGMA.

Nodes are immutable and own their two children exclusively; the tree is
built bottom-up, one internal node per merge step.
"""

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class ClusterNode:
    """Leaf (original taxon) or internal merge node.

    ``height`` is half the distance at which the two children were merged
    (0 for leaves). ``size`` is the number of leaves below the node.
    """

    name: str
    height: Fraction = Fraction(0)
    children: Tuple['ClusterNode', ...] = ()
    size: int = field(default=1, compare=False)

    def __post_init__(self):
        if self.children:
            if len(self.children) != 2:
                raise ValueError(f"Internal node {self.name} needs exactly 2 children")
            object.__setattr__(self, 'size', sum(child.size for child in self.children))

    @property
    def is_leaf(self):
        return not self.children

    def iter_nodes(self):
        """Yield every node in post-order (children before parents)."""
        stack = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded or node.is_leaf:
                yield node
                continue
            stack.append((node, True))
            for child in reversed(node.children):
                stack.append((child, False))

    def leaves(self):
        return [node for node in self.iter_nodes() if node.is_leaf]

    def leaf_order(self):
        """Leaf names, left to right."""
        return [node.name for node in self.leaves()]

    def internal_nodes(self):
        return [node for node in self.iter_nodes() if not node.is_leaf]

    def find(self, name):
        for node in self.iter_nodes():
            if node.name == name:
                return node
        raise KeyError(name)

    def branch_lengths(self):
        """Map each non-root node name to its exact edge length to the parent."""
        lengths = {}
        for node in self.internal_nodes():
            for child in node.children:
                lengths[child.name] = node.height - child.height
        return lengths

    def to_newick(self, decimals=6):
        """Newick string with branch lengths, e.g. ``((A:1,B:1):2,C:3);``."""
        def fmt(length):
            return np.format_float_positional(round(float(length), decimals), trim='-')

        def render(node):
            if node.is_leaf:
                return node.name
            inner = ','.join(f"{render(child)}:{fmt(node.height - child.height)}" for child in node.children)
            return f"({inner})"

        return render(self) + ';'


__all__ = ['ClusterNode']
