"""UPGMA (Unweighted Pair Group Method with Arithmetic Mean) clustering.

Repeatedly merges the two closest live clusters, recording every step with
its pre-merge matrix and the exact arithmetic used for each new distance:

    d(new, C) = (size(A) * d(A, C) + size(B) * d(B, C)) / (size(A) + size(B))

Distances are exact ``Fraction`` values throughout. The working matrix is
a fixed arena of ``2n - 1`` slots indexed by integer id: each merge frees
the two merged slots and fills the next unused one.

Tie-break: among pairs at the minimum distance, the pair whose ids sort
first (``min(id)``, then ``max(id)``, by string comparison) is merged.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd

from phylotutor.cluster.tree import ClusterNode
from phylotutor.core.distances import DistanceMatrix
from phylotutor.errors import DegenerateMatrix, IncompleteMatrix, InsufficientInput


def format_fraction(value):
    """Render a Fraction as ``7`` or ``37/3``."""
    return str(Fraction(value))


@dataclass(frozen=True)
class Derivation:
    """How the distance from a new cluster to one survivor was computed."""

    taxon: str
    left_distance: Fraction
    left_size: int
    right_distance: Fraction
    right_size: int

    @property
    def numerator(self):
        return self.left_distance * self.left_size + self.right_distance * self.right_size

    @property
    def denominator(self):
        return self.left_size + self.right_size

    @property
    def result(self):
        return self.numerator / self.denominator

    @property
    def decimal(self):
        return round(float(self.result), 2)

    @property
    def expression(self):
        return (
            f"({format_fraction(self.left_distance)} × {self.left_size} + "
            f"{format_fraction(self.right_distance)} × {self.right_size}) / "
            f"({self.left_size} + {self.right_size}) = "
            f"{format_fraction(self.numerator)} / {self.denominator}"
        )


@dataclass(frozen=True)
class MergeStep:
    """One clustering iteration; ``matrix`` and ``sizes`` are pre-merge."""

    number: int
    matrix: DistanceMatrix
    sizes: Dict[str, int]
    pair: Tuple[str, str]
    distance: Fraction
    new_cluster: str
    derivations: Tuple[Derivation, ...]

    @property
    def height(self):
        return self.distance / 2

    @property
    def description(self):
        return f"Merge {self.pair[0]} and {self.pair[1]} (minimum distance = {format_fraction(self.distance)})"

    def derivation_for(self, taxon):
        for derivation in self.derivations:
            if derivation.taxon == taxon:
                return derivation
        raise KeyError(taxon)


@dataclass(frozen=True)
class UPGMAResult:
    matrix: DistanceMatrix
    steps: Tuple[MergeStep, ...]
    tree: ClusterNode

    def steps_frame(self):
        """One row per merge step."""
        rows = [
            {
                'step': step.number,
                'cluster_a': step.pair[0],
                'cluster_b': step.pair[1],
                'distance': format_fraction(step.distance),
                'distance_decimal': float(step.distance),
                'height': float(step.height),
                'new_cluster': step.new_cluster,
                'size': step.sizes[step.pair[0]] + step.sizes[step.pair[1]],
            }
            for step in self.steps
        ]
        return pd.DataFrame(rows, columns=[
            'step', 'cluster_a', 'cluster_b', 'distance', 'distance_decimal',
            'height', 'new_cluster', 'size',
        ])

    def derivations_frame(self):
        """One row per (step, surviving cluster) distance derivation."""
        rows = [
            {
                'step': step.number,
                'new_cluster': step.new_cluster,
                'taxon': derivation.taxon,
                'calculation': derivation.expression,
                'result': format_fraction(derivation.result),
                'decimal': derivation.decimal,
            }
            for step in self.steps
            for derivation in step.derivations
        ]
        return pd.DataFrame(rows, columns=['step', 'new_cluster', 'taxon', 'calculation', 'result', 'decimal'])


def _check_complete(exact, live, labels):
    """Raise for the live taxon missing the most distances, if any are missing."""
    worst = None
    for a in live:
        missing = [c for c in live if c != a and exact[a, c] is None]
        if missing and (worst is None or len(missing) > len(worst[1])):
            worst = (a, missing)
    if worst is not None:
        a, missing = worst
        raise IncompleteMatrix(labels[a], labels[missing[0]])


def find_min_pair(exact, live, labels) -> Optional[Tuple[int, int]]:
    """Return the arena slots of the closest live pair, or None if no pair qualifies.

    Pairs with a negative distance are never candidates; zero is.
    """
    best_key = None
    best_pair = None
    for i, a in enumerate(live):
        for c in live[i + 1:]:
            distance = exact[a, c]
            if distance < 0:
                continue
            first, second = sorted((a, c), key=lambda slot: labels[slot])
            key = (distance, labels[first], labels[second])
            if best_key is None or key < best_key:
                best_key = key
                best_pair = (first, second)
    return best_pair


def cluster_upgma(matrix: DistanceMatrix) -> UPGMAResult:
    """Cluster a distance matrix with UPGMA.

    Parameters:
        matrix: initial DistanceMatrix; it is copied, never modified

    Returns:
        UPGMAResult with ``n - 1`` merge steps and the rooted tree

    Raises:
        InsufficientInput: matrix has fewer than 2 taxa
        IncompleteMatrix: a live taxon has no distance to another live taxon
        DegenerateMatrix: no live pair has a non-negative distance
    """
    n = len(matrix)
    if n < 2:
        raise InsufficientInput(n)

    capacity = 2 * n - 1
    exact = np.full((capacity, capacity), None, dtype=object)
    exact[:n, :n] = matrix.values
    labels = list(matrix.labels) + [None] * (n - 1)
    sizes = [1] * n + [0] * (n - 1)
    nodes = [ClusterNode(name=label) for label in matrix.labels] + [None] * (n - 1)
    live = list(range(n))

    steps = []
    for slot in range(n, capacity):
        _check_complete(exact, live, labels)
        pair = find_min_pair(exact, live, labels)
        if pair is None:
            raise DegenerateMatrix([labels[s] for s in live])
        a, b = pair

        snapshot = DistanceMatrix([labels[s] for s in live], exact[np.ix_(live, live)])
        survivors = [s for s in live if s not in pair]
        distance = exact[a, b]
        new_label = f"({labels[a]},{labels[b]})"

        derivations = []
        for c in survivors:
            derivation = Derivation(
                taxon=labels[c],
                left_distance=exact[a, c],
                left_size=sizes[a],
                right_distance=exact[b, c],
                right_size=sizes[b],
            )
            exact[slot, c] = exact[c, slot] = derivation.result
            derivations.append(derivation)
        exact[slot, slot] = Fraction(0)

        steps.append(MergeStep(
            number=len(steps) + 1,
            matrix=snapshot,
            sizes={labels[s]: sizes[s] for s in live},
            pair=(labels[a], labels[b]),
            distance=distance,
            new_cluster=new_label,
            derivations=tuple(derivations),
        ))

        labels[slot] = new_label
        sizes[slot] = sizes[a] + sizes[b]
        nodes[slot] = ClusterNode(name=new_label, height=distance / 2, children=(nodes[a], nodes[b]))
        live = [slot] + survivors

    return UPGMAResult(matrix=matrix, steps=tuple(steps), tree=nodes[live[0]])


__all__ = [
    'Derivation',
    'MergeStep',
    'UPGMAResult',
    'format_fraction',
    'find_min_pair',
    'cluster_upgma',
]
