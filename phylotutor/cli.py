"""PhyloTutor: step-by-step UPGMA clustering for the classroom.

Simple CLI entry point that orchestrates the full UPGMA pipeline.
"""

import argparse
import sys

from rich.console import Console

from phylotutor.main import UPGMAConfig, run_pipeline

console = Console()


def build_parser():
    parser = argparse.ArgumentParser(
        prog="phylotutor",
        description="PhyloTutor: UPGMA clustering from DNA sequences or a distance matrix",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  phylotutor --example
  phylotutor --sequences aligned.fasta --outdir results/
  phylotutor --matrix distances.tsv --n-clusters 2 --no-fractions
        """,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--sequences",
        type=str,
        help="Aligned DNA sequences (FASTA or one per line)",
    )
    source.add_argument(
        "--matrix",
        type=str,
        help="Distance grid (TSV/CSV); only the upper triangle is read",
    )
    source.add_argument(
        "--example",
        action="store_true",
        help="Use the built-in four-sequence example",
    )

    parser.add_argument(
        "--outdir",
        type=str,
        default=None,
        help="Directory for CSV tables and the Newick tree (default: terminal only)",
    )
    parser.add_argument(
        "--n-clusters",
        type=int,
        default=None,
        help="Report a flat clustering with this many clusters",
    )
    parser.add_argument(
        "--cut-distance",
        type=float,
        default=None,
        help="Report a flat clustering cut at this merge distance",
    )
    parser.add_argument(
        "--decimals",
        type=int,
        default=2,
        help="Decimal places for rounded output (default: 2)",
    )
    parser.add_argument(
        "--no-fractions",
        action="store_true",
        help="Show rounded decimals instead of exact fractions",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress step-by-step output",
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    config = UPGMAConfig(
        sequences_path=args.sequences,
        matrix_path=args.matrix,
        use_example=args.example,
        outdir=args.outdir,
        n_clusters=args.n_clusters,
        cut_distance=args.cut_distance,
        show_fractions=not args.no_fractions,
        decimals=args.decimals,
        verbose=not args.quiet,
    )

    try:
        run_pipeline(config)
        return 0
    except (ValueError, OSError) as e:
        console.print(f"\n✗ {e}", style="bold red", markup=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())
