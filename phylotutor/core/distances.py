"""Distance matrix construction for UPGMA clustering.

Two builders produce the initial symmetric, zero-diagonal matrix:

- ``build_matrix_from_sequences``: pairwise Hamming distance between
  equal-length aligned DNA sequences (labels ``Seq1``, ``Seq2``, ...).
- ``build_matrix_from_grid``: a user-entered square grid whose strict upper
  triangle is mirrored (labels ``Species1``, ``Species2``, ...).

All values are kept as exact ``fractions.Fraction`` so that averaged
distances computed later never drift.
"""

import math
import numbers
from fractions import Fraction

import numpy as np
import pandas as pd

from phylotutor.errors import (
    InsufficientInput,
    InvalidAlphabet,
    InvalidDistance,
    InvalidLabel,
    LengthMismatch,
)

DNA_ALPHABET = frozenset('ACGT')

# Characters that would make a label ambiguous inside a merged "(A,B)" id or Newick string
RESERVED_LABEL_CHARS = frozenset('(),:;')

# Decimal places of the float projection of exact distances
PROJECTION_DECIMALS = 10


def to_fraction(value):
    """Convert a numeric value to an exact ``Fraction``.

    Floats go through their shortest decimal representation, so ``0.1``
    becomes ``1/10`` rather than its binary expansion. Strings may be
    decimals (``"2.5"``) or ratios (``"5/2"``).

    Raises:
        InvalidDistance: value is not a finite number
    """
    if isinstance(value, Fraction):
        return value
    if isinstance(value, bool):
        raise InvalidDistance(f"Not a distance: {value!r}")
    if isinstance(value, numbers.Integral):
        return Fraction(int(value))
    if isinstance(value, numbers.Rational):
        return Fraction(value.numerator, value.denominator)
    if isinstance(value, numbers.Real):
        value = float(value)
        if not math.isfinite(value):
            raise InvalidDistance(f"Distance must be finite, got {value!r}")
        return Fraction(repr(value))
    if isinstance(value, str):
        try:
            return Fraction(value.strip())
        except (ValueError, ZeroDivisionError) as exc:
            raise InvalidDistance(f"Not a number: {value!r}") from exc
    try:
        return Fraction(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidDistance(f"Not a number: {value!r}") from exc


class DistanceMatrix:
    """Immutable symmetric distance matrix keyed by taxon label.

    Entries are exact ``Fraction`` values; ``None`` marks a missing
    distance. A missing entry is filled from its mirror when the mirror is
    present, so the stored matrix is always symmetric.

    Examples:
        >>> m = DistanceMatrix(['A', 'B'], [[0, 3], [3, 0]])
        >>> m['A', 'B']
        Fraction(3, 1)
        >>> m.value('B', 'A')
        3.0
    """

    def __init__(self, labels, values):
        labels = tuple(str(label) for label in labels)
        if len(set(labels)) != len(labels):
            raise InvalidLabel(f"Duplicate taxon labels: {labels}")
        n = len(labels)

        if hasattr(values, 'to_numpy'):
            values = values.to_numpy()
        rows = [list(row) for row in values]
        if len(rows) != n or any(len(row) != n for row in rows):
            raise InvalidDistance(f"Distance matrix must be {n}x{n} to match its labels")

        grid = np.empty((n, n), dtype=object)
        for i, row in enumerate(rows):
            for j, cell in enumerate(row):
                if _is_missing(cell):
                    grid[i, j] = None
                    continue
                value = to_fraction(cell)
                if value < 0:
                    raise InvalidDistance(f"d({labels[i]},{labels[j]}) must be non-negative, got {value}")
                grid[i, j] = value

        for i in range(n):
            if grid[i, i] not in (None, 0):
                raise InvalidDistance(f"Diagonal entry for {labels[i]} must be 0, got {grid[i, i]}")
            grid[i, i] = Fraction(0)
            for j in range(i + 1, n):
                upper, lower = grid[i, j], grid[j, i]
                if upper is None:
                    grid[i, j] = lower
                elif lower is None:
                    grid[j, i] = upper
                elif upper != lower:
                    raise InvalidDistance(
                        f"Matrix is not symmetric: d({labels[i]},{labels[j]})={upper} "
                        f"but d({labels[j]},{labels[i]})={lower}"
                    )

        grid.setflags(write=False)
        self._labels = labels
        self._index = {label: i for i, label in enumerate(labels)}
        self._values = grid

    @classmethod
    def from_mapping(cls, mapping):
        """Build from a nested ``{row: {col: distance}}`` mapping.

        Row order defines label order; absent cells are treated as missing.
        """
        labels = list(mapping)
        values = [[mapping[row].get(col) for col in labels] for row in labels]
        return cls(labels, values)

    @property
    def labels(self):
        return self._labels

    @property
    def values(self):
        """Read-only object array of exact entries."""
        return self._values

    def __len__(self):
        return len(self._labels)

    def __contains__(self, label):
        return label in self._index

    def __getitem__(self, key):
        row, col = key
        return self._values[self._index[row], self._index[col]]

    def index(self, label):
        return self._index[label]

    def value(self, row, col):
        """Float projection of ``self[row, col]`` (``None`` when missing)."""
        exact = self[row, col]
        if exact is None:
            return None
        return round(float(exact), PROJECTION_DECIMALS)

    def pairs(self):
        """Yield ``(label_a, label_b, distance)`` over the strict upper triangle."""
        for i, row in enumerate(self._labels):
            for j in range(i + 1, len(self._labels)):
                yield row, self._labels[j], self._values[i, j]

    def to_mapping(self):
        return {
            row: {col: self._values[i, j] for j, col in enumerate(self._labels)}
            for i, row in enumerate(self._labels)
        }

    def to_numpy(self):
        """Float array of the matrix, NaN where an entry is missing."""
        n = len(self._labels)
        out = np.full((n, n), np.nan, dtype=float)
        for i in range(n):
            for j in range(n):
                cell = self._values[i, j]
                if cell is not None:
                    out[i, j] = round(float(cell), PROJECTION_DECIMALS)
        return out

    def to_frame(self, decimals=None):
        frame = pd.DataFrame(self.to_numpy(), index=list(self._labels), columns=list(self._labels))
        if decimals is not None:
            frame = frame.round(decimals)
        return frame

    def to_fraction_frame(self):
        """DataFrame of exact entries rendered as ``p/q`` strings."""
        cells = [['' if cell is None else str(cell) for cell in row] for row in self._values]
        return pd.DataFrame(cells, index=list(self._labels), columns=list(self._labels))

    def __eq__(self, other):
        if not isinstance(other, DistanceMatrix):
            return NotImplemented
        return self._labels == other._labels and self._values.tolist() == other._values.tolist()

    __hash__ = None

    def __repr__(self):
        return f"DistanceMatrix(labels={list(self._labels)!r})"


def _is_missing(cell):
    if cell is None:
        return True
    if isinstance(cell, numbers.Real) and not isinstance(cell, numbers.Rational):
        return math.isnan(cell)
    return False


def _resolve_labels(names, count, prefix):
    if names is None:
        return [f'{prefix}{i + 1}' for i in range(count)]

    labels = []
    for name in names:
        label = '' if name is None else str(name).strip()
        if not label:
            raise InvalidLabel("Taxon names must be non-empty")
        bad = RESERVED_LABEL_CHARS.intersection(label)
        if bad:
            raise InvalidLabel(f"Taxon name {label!r} contains reserved characters {''.join(sorted(bad))!r}")
        labels.append(label)
    if len(set(labels)) != len(labels):
        raise InvalidLabel(f"Taxon names must be unique: {labels}")
    return labels


def clean_sequence(sequence, taxon='sequence'):
    """Trim and upper-case a DNA sequence, rejecting non-ACGT characters.

    Raises:
        InvalidAlphabet: sequence contains anything besides A, C, T, G
    """
    cleaned = str(sequence).strip().upper()
    invalid = set(cleaned) - DNA_ALPHABET
    if invalid:
        raise InvalidAlphabet(taxon, invalid)
    return cleaned


def hamming_distance(seq1, seq2):
    """Count positions at which two equal-length DNA sequences differ.

    Examples:
        >>> hamming_distance('AAAA', 'AAAT')
        1
        >>> hamming_distance('ACGT', 'tgca')
        4
    """
    first = clean_sequence(seq1, 'Seq1')
    second = clean_sequence(seq2, 'Seq2')
    if len(first) != len(second):
        raise LengthMismatch('Seq1', len(first), 'Seq2', len(second))
    return sum(a != b for a, b in zip(first, second))


def pairwise_hamming(sequences):
    """Hamming distance matrix (int ndarray) of cleaned, equal-length sequences."""
    encoded = np.array([np.frombuffer(seq.encode('ascii'), dtype=np.uint8) for seq in sequences])
    return (encoded[:, None, :] != encoded[None, :, :]).sum(axis=2)


def build_matrix_from_sequences(sequences, names=None):
    """Build a Hamming distance matrix from aligned DNA sequences.

    Parameters:
        sequences: iterable of strings over {A, C, T, G} (case-insensitive)
        names: optional taxon names, one per input sequence; defaults to
               ``Seq1``, ``Seq2``, ... assigned after blank sequences are dropped

    Returns:
        DistanceMatrix keyed by taxon label, in input order

    Raises:
        InsufficientInput: fewer than 2 non-blank sequences
        InvalidAlphabet: a sequence has characters outside {A, C, T, G}
        LengthMismatch: sequences differ in length
    """
    sequences = list(sequences)
    if names is not None:
        names = list(names)
        if len(names) != len(sequences):
            raise InvalidLabel(f"Got {len(names)} names for {len(sequences)} sequences")

    kept = [i for i, seq in enumerate(sequences) if seq is not None and str(seq).strip()]
    if len(kept) < 2:
        raise InsufficientInput(len(kept))

    labels = _resolve_labels(None if names is None else [names[i] for i in kept], len(kept), 'Seq')
    cleaned = [clean_sequence(sequences[i], label) for i, label in zip(kept, labels)]

    reference = len(cleaned[0])
    for label, seq in zip(labels[1:], cleaned[1:]):
        if len(seq) != reference:
            raise LengthMismatch(labels[0], reference, label, len(seq))

    hamming = pairwise_hamming(cleaned)
    return DistanceMatrix(labels, [[Fraction(int(d)) for d in row] for row in hamming])


def _grid_cell(cell, row_label, col_label):
    if cell is None:
        return Fraction(0)
    if isinstance(cell, str) and not cell.strip():
        return Fraction(0)
    if isinstance(cell, numbers.Real) and not isinstance(cell, numbers.Rational) and math.isnan(cell):
        return Fraction(0)
    try:
        value = to_fraction(cell)
    except InvalidDistance as exc:
        raise InvalidDistance(f"d({row_label},{col_label}): {exc}") from exc
    if value < 0:
        raise InvalidDistance(f"d({row_label},{col_label}) must be non-negative, got {value}")
    return value


def build_matrix_from_grid(grid, names=None):
    """Build a distance matrix from a user-entered square grid.

    Only the strict upper triangle is read; the diagonal and lower triangle
    are reconstructed (zero and mirror). Rows may be ragged and blank,
    ``None`` or NaN cells count as 0.

    Parameters:
        grid: n x n rows of numbers (ints, floats, numeric strings, Fractions)
        names: optional taxon names; defaults to ``Species1``, ``Species2``, ...

    Raises:
        InsufficientInput: fewer than 2 rows
        InvalidDistance: a cell is negative or not a finite number
    """
    if hasattr(grid, 'to_numpy'):
        grid = grid.to_numpy()
    rows = [[] if row is None else list(row) for row in grid]
    n = len(rows)
    if n < 2:
        raise InsufficientInput(n)

    if names is not None:
        names = list(names)
        if len(names) != n:
            raise InvalidLabel(f"Got {len(names)} names for a {n}x{n} grid")
    labels = _resolve_labels(names, n, 'Species')

    values = [[Fraction(0)] * n for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            cell = rows[i][j] if j < len(rows[i]) else None
            values[i][j] = values[j][i] = _grid_cell(cell, labels[i], labels[j])

    return DistanceMatrix(labels, values)


__all__ = [
    'DNA_ALPHABET',
    'DistanceMatrix',
    'to_fraction',
    'clean_sequence',
    'hamming_distance',
    'pairwise_hamming',
    'build_matrix_from_sequences',
    'build_matrix_from_grid',
]
