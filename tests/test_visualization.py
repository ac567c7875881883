from fractions import Fraction

from rich.console import Console

from phylotutor.cluster.upgma import cluster_upgma
from phylotutor.core.distances import build_matrix_from_grid, build_matrix_from_sequences
from phylotutor.core.input import EXAMPLE_SEQUENCES
from phylotutor.visualization.tables import derivations_table, matrix_table, tree_view
from phylotutor.visualization.utils import format_distance, natural_key, num_from


def test_num_from():
    assert num_from("Seq12") == 12
    assert num_from("(Seq1,Seq2)") is None
    assert num_from(None) is None


def test_natural_key_orders_labels():
    labels = ["Seq10", "(Seq1,Seq2)", "Seq2", "Seq1"]
    assert sorted(labels, key=natural_key) == ["Seq1", "Seq2", "Seq10", "(Seq1,Seq2)"]


def test_format_distance():
    assert format_distance(Fraction(37, 3)) == "37/3"
    assert format_distance(Fraction(37, 3), exact=False) == "12.33"
    assert format_distance(Fraction(7), exact=False) == "7"
    assert format_distance(None) == "-"


def test_matrix_table_layout():
    matrix = build_matrix_from_grid([[0, 1, 2], [0, 0, 3], [0, 0, 0]])
    table = matrix_table(matrix, highlight=("Species1", "Species2"))
    assert table.row_count == 3
    assert len(table.columns) == 4


def test_step_rendering():
    result = cluster_upgma(build_matrix_from_sequences(EXAMPLE_SEQUENCES))
    console = Console(record=True, width=200)
    console.print(derivations_table(result.steps[1]))
    console.print(tree_view(result.tree))
    text = console.export_text()
    assert "(12 × 2 + 13 × 1) / (2 + 1) = 37 / 3" in text
    assert "Seq4" in text
    assert len(tree_view(result.tree).children) == 2


def test_labels_render_literally():
    matrix = build_matrix_from_grid([[0, 1, 4], [0, 0, 4], [0, 0, 0]], names=["a[/x]", "[bold]b", "c"])
    result = cluster_upgma(matrix)
    console = Console(record=True, width=200)
    console.print(matrix_table(matrix, highlight=("a[/x]", "[bold]b")))
    console.print(derivations_table(result.steps[0]))
    console.print(tree_view(result.tree))
    text = console.export_text()
    assert "a[/x]" in text
    assert "[bold]b" in text
    assert "d(([bold]b,a[/x]), c)" in text
