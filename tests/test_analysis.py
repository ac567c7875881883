from fractions import Fraction
from itertools import combinations

import numpy as np
import pytest
from scipy.cluster.hierarchy import is_valid_linkage, linkage
from scipy.spatial.distance import squareform

from phylotutor.cluster.analysis import (
    analyze_dendrogram,
    cophenetic_matrix,
    get_clusters_at_distance,
    get_clusters_at_level,
    get_clusters_at_multiple_levels,
    get_optimal_distance_levels,
    linkage_matrix,
)
from phylotutor.cluster.upgma import cluster_upgma
from phylotutor.core.distances import build_matrix_from_grid, build_matrix_from_sequences
from phylotutor.core.input import EXAMPLE_SEQUENCES


@pytest.fixture
def example_result():
    return cluster_upgma(build_matrix_from_sequences(EXAMPLE_SEQUENCES))


def test_linkage_matrix(example_result):
    Z = linkage_matrix(example_result)
    assert is_valid_linkage(Z)
    expected = np.array([
        [1, 2, 2, 2],
        [0, 4, 7, 3],
        [3, 5, 37 / 3, 4],
    ])
    assert np.allclose(Z, expected)


def test_matches_scipy_average_linkage():
    rng = np.random.default_rng(42)
    upper = np.triu(np.round(rng.random((9, 9)) * 50, 2), 1)
    result = cluster_upgma(build_matrix_from_grid(upper))

    reference = linkage(squareform(upper + upper.T), method="average")
    ours = linkage_matrix(result)
    assert np.allclose(ours[:, 2], reference[:, 2])
    assert np.array_equal(ours[:, 3], reference[:, 3])


def test_flat_clusters(example_result):
    Z = linkage_matrix(example_result)

    labels = get_clusters_at_distance(Z, 5)
    assert len(set(labels)) == 3
    assert labels[1] == labels[2]

    labels = get_clusters_at_level(Z, 2)
    assert labels[0] == labels[1] == labels[2]
    assert labels[3] != labels[0]

    levels = get_clusters_at_multiple_levels(Z, [1, 20])
    assert len(set(levels[1])) == 4
    assert len(set(levels[20])) == 1


def test_cophenetic_matrix_is_ultrametric(example_result):
    coph = cophenetic_matrix(example_result.tree, labels=example_result.matrix.labels)
    assert coph["Seq2", "Seq3"] == 2
    assert coph["Seq1", "Seq2"] == 7
    assert coph["Seq1", "Seq4"] == Fraction(37, 3)

    # Three-point condition: the two largest of any triple are equal
    for a, b, c in combinations(coph.labels, 3):
        d = sorted([coph[a, b], coph[a, c], coph[b, c]])
        assert d[1] == d[2]


def test_cophenetic_default_order(example_result):
    coph = cophenetic_matrix(example_result.tree)
    assert coph.labels == ("Seq2", "Seq3", "Seq1", "Seq4")


def test_optimal_distance_levels():
    Z = np.array([
        [0, 1, 1.0, 2],
        [2, 3, 1.5, 2],
        [4, 5, 9.0, 4],
    ])
    assert get_optimal_distance_levels(Z, n_levels=1) == [1.5]


def test_analyze_dendrogram(example_result):
    analysis = analyze_dendrogram(example_result)
    assert analysis["n_taxa"] == 4
    assert analysis["n_merges"] == 3
    assert analysis["min_distance"] == 2
    assert analysis["max_distance"] == pytest.approx(37 / 3)
    assert analysis["root_height"] == pytest.approx(37 / 6)
    assert analysis["leaf_order"] == ["Seq2", "Seq3", "Seq1", "Seq4"]
    assert analysis["suggested_levels"] == sorted(analysis["suggested_levels"])
