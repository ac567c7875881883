"""PhyloTutor: UPGMA phylogenetic clustering with an exact, step-by-step audit trail."""

from phylotutor.cluster.tree import ClusterNode
from phylotutor.cluster.upgma import Derivation, MergeStep, UPGMAResult, cluster_upgma
from phylotutor.core.distances import (
    DistanceMatrix,
    build_matrix_from_grid,
    build_matrix_from_sequences,
    hamming_distance,
)
from phylotutor.errors import (
    DegenerateMatrix,
    IncompleteMatrix,
    InsufficientInput,
    InvalidAlphabet,
    InvalidDistance,
    InvalidLabel,
    LengthMismatch,
    PhyloTutorError,
)

__version__ = '0.1.0'

__all__ = [
    'ClusterNode',
    'Derivation',
    'MergeStep',
    'UPGMAResult',
    'cluster_upgma',
    'DistanceMatrix',
    'build_matrix_from_grid',
    'build_matrix_from_sequences',
    'hamming_distance',
    'PhyloTutorError',
    'InvalidAlphabet',
    'LengthMismatch',
    'InsufficientInput',
    'IncompleteMatrix',
    'DegenerateMatrix',
    'InvalidDistance',
    'InvalidLabel',
]
