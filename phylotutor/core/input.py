"""Loading of sequence and distance-grid input files.

Supports:
- FASTA files (``>name`` headers, sequence may wrap over several lines)
- Plain sequence files (one sequence per line, ``#`` comments)
- Distance grids as TSV/CSV/whitespace tables, optionally with a header
  row and/or a leading column of taxon names
- Gzipped/compressed files (.gz, .xz) for both
"""

import gzip
import lzma
from fractions import Fraction

import pandas as pd

from phylotutor.errors import InvalidLabel

# Classroom example: four aligned sequences of length 29
EXAMPLE_SEQUENCES = (
    'GTATAGGGGATATACTGAGAGCTATTACA',
    'GTATTGGCGATATTCCGAGACCTATTACT',
    'CTATTGGCCATATTCCGAGACCTATTACT',
    'GTATAGCCGATACCCGAGACCTAATTACT',
)


def _open_text(path):
    path = str(path)
    if path.endswith('.gz'):
        return gzip.open(path, 'rt')
    if path.endswith('.xz'):
        return lzma.open(path, 'rt')
    return open(path, 'rt')


def read_sequences(path):
    """Read DNA sequences from a FASTA or one-per-line text file.

    Parameters:
        path (str): Path to the input file

    Returns:
        tuple: (sequences, names) where names is None for plain files

    Raises:
        InvalidLabel: a FASTA file has sequence lines before its first header
    """
    with _open_text(path) as handle:
        lines = [line.strip() for line in handle]
    lines = [line for line in lines if line and not line.startswith('#')]

    if not any(line.startswith('>') for line in lines):
        return lines, None

    sequences, names = [], []
    for line in lines:
        if line.startswith('>'):
            names.append(line[1:].split()[0] if line[1:].strip() else '')
            sequences.append('')
        elif sequences:
            sequences[-1] += line
        else:
            raise InvalidLabel(f"{path}: sequence data before the first '>' header")
    return sequences, names


def read_file_preview(path, nlines=-1):
    """Read a delimited table as strings, trying tab, comma, then whitespace.

    Parameters:
        path (str): Path to the input file
        nlines (int): Number of lines to read; -1 reads the entire file

    Returns:
        pandas.DataFrame: Cells as strings (blank for missing), no header inferred
    """
    read_base = {'dtype': str, 'header': None, 'keep_default_na': False}
    if nlines != -1:
        read_base['nrows'] = nlines
    path = str(path)
    if path.endswith('.gz'):
        read_base['compression'] = 'gzip'
    elif path.endswith('.xz'):
        read_base['compression'] = 'xz'

    for extra in ({'sep': '\t'}, {'sep': ','}):
        try:
            df = pd.read_csv(path, **read_base, **extra)
        except (pd.errors.ParserError, ValueError):
            continue
        if df.shape[1] > 1:
            return df.fillna('')

    df = pd.read_csv(path, **read_base, sep=r'\s+', engine='python')
    return df.fillna('')


def _is_number(cell):
    try:
        Fraction(str(cell).strip())
    except (ValueError, ZeroDivisionError):
        return False
    return True


def _is_label(cell):
    text = str(cell).strip()
    return bool(text) and not _is_number(text)


def read_distance_grid(path):
    """Read a square distance grid from a delimited file.

    A first row holding any non-numeric cell is taken as a header of taxon
    names; a first column holding any non-numeric cell is taken as row
    names. Blank cells are kept as empty strings (read as 0 downstream).

    Returns:
        tuple: (grid, names) - grid as a list of row lists of strings,
               names as a list or None
    """
    df = read_file_preview(path)
    rows = df.values.tolist()

    header = None
    if rows and any(_is_label(cell) for cell in rows[0]):
        header = [str(cell).strip() for cell in rows[0]]
        rows = rows[1:]

    index = None
    if rows and any(_is_label(row[0]) for row in rows):
        index = [str(row[0]).strip() for row in rows]
        rows = [row[1:] for row in rows]
    elif header is not None and len(header) == len(rows) + 1:
        # Header has a corner cell above an unlabelled first column
        rows = [row[1:] for row in rows]

    names = index
    if names is None and header is not None:
        names = header[-len(rows):] if rows else []

    grid = [[str(cell).strip() for cell in row] for row in rows]
    return grid, names


__all__ = [
    'EXAMPLE_SEQUENCES',
    'read_sequences',
    'read_file_preview',
    'read_distance_grid',
]
