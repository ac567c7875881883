"""Post-clustering analysis of UPGMA results.

Converts a UPGMA result into a scipy linkage matrix so that the standard
``scipy.cluster.hierarchy`` tooling (flat cluster cuts, cophenetic checks)
can be applied, and summarises the merge heights.
"""

from fractions import Fraction

import numpy as np
from scipy.cluster.hierarchy import fcluster

from phylotutor.core.distances import DistanceMatrix


def linkage_matrix(result):
    """Build a scipy-compatible linkage matrix from a UPGMA result.

    Parameters:
        result: UPGMAResult from ``cluster_upgma``

    Returns:
        Z: (n-1) x 4 float array. Leaf i is the i-th label of the initial
           matrix, the cluster formed at step k is ``n + k``. Column 2 holds
           the full merge distance (twice the node height).
    """
    labels = result.matrix.labels
    n = len(labels)
    index = {label: i for i, label in enumerate(labels)}
    Z = np.zeros((n - 1, 4), dtype=float)
    for k, step in enumerate(result.steps):
        first, second = sorted((index[step.pair[0]], index[step.pair[1]]))
        size = step.sizes[step.pair[0]] + step.sizes[step.pair[1]]
        Z[k] = [first, second, float(step.distance), size]
        index[step.new_cluster] = n + k
    return Z


def get_clusters_at_distance(Z, distance_threshold):
    """Get cluster labels by cutting the dendrogram at a merge distance.

    Parameters:
        Z: Linkage matrix
        distance_threshold: Taxa merged at or below this distance share a cluster

    Returns:
        labels: Cluster labels for each taxon (initial matrix order)
    """
    return fcluster(Z, distance_threshold, criterion='distance')


def get_clusters_at_level(Z, n_clusters):
    """Get cluster labels by specifying the number of clusters."""
    return fcluster(Z, n_clusters, criterion='maxclust')


def get_clusters_at_multiple_levels(Z, distance_levels):
    """Get cluster assignments at multiple distance levels.

    Returns:
        dict: {distance: labels_array}
    """
    return {dist: get_clusters_at_distance(Z, dist) for dist in distance_levels}


def get_optimal_distance_levels(Z, n_levels=5):
    """Get suggested distance levels from the dendrogram.

    Finds the n largest jumps between consecutive merge distances, which
    typically separate meaningful groups.

    Returns:
        list: Suggested distance thresholds (sorted ascending)
    """
    distances = Z[:, 2]
    diffs = np.diff(distances)
    largest_jumps = np.argsort(diffs, kind='stable')[-n_levels:][::-1]
    suggested_distances = np.sort(distances[largest_jumps])
    return suggested_distances.tolist()


def cophenetic_matrix(tree, labels=None):
    """Exact tree distances between leaves: twice the height of their lowest common ancestor.

    For a UPGMA tree this matrix is ultrametric.

    Parameters:
        tree: root ClusterNode
        labels: optional label order (defaults to the tree's leaf order)
    """
    if labels is None:
        labels = tree.leaf_order()
    distances = {}
    for node in tree.internal_nodes():
        left, right = (child.leaf_order() for child in node.children)
        for a in left:
            for b in right:
                distances[a, b] = distances[b, a] = 2 * node.height
    values = [
        [Fraction(0) if a == b else distances[a, b] for b in labels]
        for a in labels
    ]
    return DistanceMatrix(labels, values)


def analyze_dendrogram(result):
    """Analyze dendrogram structure and return statistics.

    Returns:
        dict: Analysis results including:
            - n_taxa: Number of input taxa
            - n_merges: Number of merge steps
            - min_distance / max_distance / mean_distance / median_distance:
              statistics of the merge distances
            - root_height: Height of the root node
            - leaf_order: Leaf names left to right
            - suggested_levels: List of suggested cut distances
    """
    Z = linkage_matrix(result)
    distances = Z[:, 2]

    return {
        'n_taxa': len(result.matrix),
        'n_merges': len(Z),
        'min_distance': float(distances.min()),
        'max_distance': float(distances.max()),
        'mean_distance': float(distances.mean()),
        'median_distance': float(np.median(distances)),
        'root_height': float(result.tree.height),
        'leaf_order': result.tree.leaf_order(),
        'suggested_levels': get_optimal_distance_levels(Z, n_levels=5),
    }


__all__ = [
    'linkage_matrix',
    'get_clusters_at_distance',
    'get_clusters_at_level',
    'get_clusters_at_multiple_levels',
    'get_optimal_distance_levels',
    'cophenetic_matrix',
    'analyze_dendrogram',
]
