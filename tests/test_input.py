import gzip

import pytest

from phylotutor.core.distances import build_matrix_from_grid
from phylotutor.core.input import read_distance_grid, read_sequences
from phylotutor.errors import InvalidLabel


def test_read_plain_sequences(tmp_path):
    p = tmp_path / "seqs.txt"
    p.write_text("# aligned\nACGT\n\nacga\n")
    sequences, names = read_sequences(str(p))
    assert sequences == ["ACGT", "acga"]
    assert names is None


def test_read_fasta(tmp_path):
    p = tmp_path / "seqs.fasta"
    p.write_text(">human some description\nACGT\nAC\n>mouse\nACGTAA\n")
    sequences, names = read_sequences(str(p))
    assert sequences == ["ACGTAC", "ACGTAA"]
    assert names == ["human", "mouse"]


def test_fasta_data_before_first_header_rejected(tmp_path):
    p = tmp_path / "seqs.fasta"
    p.write_text("ACGT\n>a\nACGA\n>b\nACGG\n")
    with pytest.raises(InvalidLabel, match="before the first"):
        read_sequences(str(p))


def test_read_gzipped_fasta(tmp_path):
    p = tmp_path / "seqs.fasta.gz"
    with gzip.open(p, "wt") as handle:
        handle.write(">a\nACGT\n>b\nACGA\n")
    sequences, names = read_sequences(str(p))
    assert names == ["a", "b"]
    assert sequences[1] == "ACGA"


def test_read_unlabelled_comma_grid(tmp_path):
    p = tmp_path / "grid.csv"
    p.write_text("0,5,9\n5,0,4\n9,4,0\n")
    grid, names = read_distance_grid(str(p))
    assert names is None
    assert grid == [["0", "5", "9"], ["5", "0", "4"], ["9", "4", "0"]]


def test_read_labelled_tsv_grid(tmp_path):
    p = tmp_path / "grid.tsv"
    p.write_text("\tA\tB\tC\nA\t0\t2\t4\nB\t2\t0\t4\nC\t4\t4\t0\n")
    grid, names = read_distance_grid(str(p))
    assert names == ["A", "B", "C"]
    m = build_matrix_from_grid(grid, names=names)
    assert m["A", "B"] == 2
    assert m["C", "B"] == 4


def test_read_header_only_grid(tmp_path):
    p = tmp_path / "grid.tsv"
    p.write_text("x\ty\n0\t1.5\n1.5\t0\n")
    grid, names = read_distance_grid(str(p))
    assert names == ["x", "y"]
    assert build_matrix_from_grid(grid, names=names)["x", "y"] == 1.5


def test_read_upper_triangle_with_blanks(tmp_path):
    p = tmp_path / "grid.tsv"
    p.write_text("0\t3\t6\n\t0\t5\n\t\t0\n")
    grid, names = read_distance_grid(str(p))
    m = build_matrix_from_grid(grid)
    assert m["Species3", "Species1"] == 6
    assert m["Species2", "Species3"] == 5
