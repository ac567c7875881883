import pandas as pd
import pytest

from phylotutor.cli import main
from phylotutor.config_utils import validate_config
from phylotutor.main import UPGMAConfig, run_pipeline


def test_example_pipeline_exports(tmp_path):
    outdir = tmp_path / "out"
    results = run_pipeline(UPGMAConfig(use_example=True, outdir=str(outdir), verbose=False))

    assert len(results["step_3_upgma"]["steps"]) == 3
    assert results["step_4_analysis"]["analysis"]["n_taxa"] == 4

    newick = (outdir / "upgma_tree.nwk").read_text().strip()
    assert newick == "(((Seq2:1,Seq3:1):2.5,Seq1:3.5):2.666667,Seq4:6.166667);"

    steps = pd.read_csv(outdir / "upgma_steps.csv")
    assert list(steps["new_cluster"]) == ["(Seq2,Seq3)", "((Seq2,Seq3),Seq1)", "(((Seq2,Seq3),Seq1),Seq4)"]

    matrix = pd.read_csv(outdir / "distance_matrix.csv", index_col=0)
    assert matrix.loc["Seq1", "Seq4"] == 13

    derivations = pd.read_csv(outdir / "upgma_derivations.csv")
    assert len(derivations) == 3


def test_matrix_pipeline_with_flat_clusters(tmp_path):
    p = tmp_path / "grid.tsv"
    p.write_text("\tA\tB\tC\tD\nA\t0\t2\t6\t10\nB\t2\t0\t6\t10\nC\t6\t6\t0\t10\nD\t10\t10\t10\t0\n")
    results = run_pipeline(UPGMAConfig(matrix_path=str(p), cut_distance=3, n_clusters=2, verbose=False))

    clusters = results["step_4_analysis"]["clusters"]
    assert clusters["cut_distance"]["A"] == clusters["cut_distance"]["B"]
    assert len(set(clusters["cut_distance"].values())) == 3
    assert clusters["n_clusters"]["A"] == clusters["n_clusters"]["C"]
    assert clusters["n_clusters"]["D"] != clusters["n_clusters"]["A"]
    assert results["step_5_export"] == {}


def test_sequence_file_pipeline(tmp_path):
    p = tmp_path / "seqs.fasta"
    p.write_text(">a\nACGTACGT\n>b\nACGTACGA\n>c\nTCGTACGA\n")
    results = run_pipeline(UPGMAConfig(sequences_path=str(p), verbose=False))
    assert results["step_3_upgma"]["tree"].leaf_order() == ["a", "b", "c"]


@pytest.mark.parametrize("kwargs", [
    {},
    {"use_example": True, "matrix_path": "grid.tsv"},
    {"sequences_path": "does-not-exist.fasta"},
    {"use_example": True, "decimals": -1},
    {"use_example": True, "n_clusters": 0},
    {"use_example": True, "cut_distance": -2.0},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        validate_config(UPGMAConfig(**kwargs))


def test_cli_example(tmp_path):
    assert main(["--example", "--quiet", "--outdir", str(tmp_path)]) == 0
    assert (tmp_path / "upgma_tree.nwk").exists()


def test_cli_reports_input_errors(tmp_path):
    p = tmp_path / "seqs.txt"
    p.write_text("ACGTACGTAC\nACGTACGTACGT\n")
    assert main(["--sequences", str(p), "--quiet"]) == 1

    assert main(["--matrix", str(tmp_path / "missing.tsv"), "--quiet"]) == 1


def test_bracketed_names_are_printed_verbatim(tmp_path, capsys):
    p = tmp_path / "seqs.fasta"
    p.write_text(">a[/x]\nACGTACGT\n>b\nACGTACGA\n>c\nTCGTACGA\n")
    assert main(["--sequences", str(p), "--quiet"]) == 0

    run_pipeline(UPGMAConfig(sequences_path=str(p)))
    assert "a[/x]" in capsys.readouterr().out
