"""Error taxonomy for distance-matrix building and UPGMA clustering.

Every error is raised at the point of violation and propagated to the
caller unchanged; nothing in ``phylotutor.core`` or ``phylotutor.cluster``
catches or recovers from them.
"""


class PhyloTutorError(ValueError):
    """Base class for all input and clustering errors."""


class InvalidAlphabet(PhyloTutorError):
    """A sequence contains characters outside {A, C, T, G}."""

    def __init__(self, taxon, characters):
        self.taxon = taxon
        self.characters = ''.join(sorted(set(characters)))
        super().__init__(
            f"{taxon}: DNA sequence can only contain A, C, T, G characters "
            f"(found {self.characters!r})"
        )


class LengthMismatch(PhyloTutorError):
    """Two sequences have different lengths."""

    def __init__(self, first, first_length, second, second_length):
        self.first = first
        self.first_length = first_length
        self.second = second
        self.second_length = second_length
        super().__init__(
            f"Sequences must be of equal length. "
            f"{first}: {first_length}, {second}: {second_length}"
        )


class InsufficientInput(PhyloTutorError):
    """Fewer than two taxa were supplied."""

    def __init__(self, count):
        self.count = count
        super().__init__(f"At least 2 taxa are required (got {count})")


class IncompleteMatrix(PhyloTutorError):
    """A live taxon lacks a distance entry to another live taxon."""

    def __init__(self, taxon, other=None):
        self.taxon = taxon
        self.other = other
        detail = f" to {other}" if other is not None else ''
        super().__init__(f"No distance defined from {taxon}{detail}")


class DegenerateMatrix(PhyloTutorError):
    """No pair of live taxa qualifies as a merge candidate."""

    def __init__(self, taxa):
        self.taxa = tuple(taxa)
        super().__init__(
            f"No valid minimum distance among {len(self.taxa)} clusters: "
            f"{', '.join(self.taxa)}"
        )


class InvalidDistance(PhyloTutorError):
    """A distance value is negative, non-numeric, or breaks matrix shape rules."""


class InvalidLabel(PhyloTutorError):
    """A user-given taxon name is empty, duplicated, or uses tree syntax."""


__all__ = [
    'PhyloTutorError',
    'InvalidAlphabet',
    'LengthMismatch',
    'InsufficientInput',
    'IncompleteMatrix',
    'DegenerateMatrix',
    'InvalidDistance',
    'InvalidLabel',
]
