"""PhyloTutor UPGMA Pipeline - Main Orchestrator

Five-step teaching pipeline:
1. Input (sequence file, distance grid, or the built-in example)
2. Distance Matrix
3. UPGMA Clustering, shown step by step
4. Analysis (merge heights, flat clusters)
5. Export (CSV tables + Newick tree)
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from phylotutor.cluster.analysis import (
    analyze_dendrogram,
    get_clusters_at_distance,
    get_clusters_at_level,
    linkage_matrix,
)
from phylotutor.cluster.upgma import cluster_upgma
from phylotutor.config_utils import print_config_summary, validate_config
from phylotutor.core.distances import build_matrix_from_grid, build_matrix_from_sequences
from phylotutor.core.input import EXAMPLE_SEQUENCES, read_distance_grid, read_sequences
from phylotutor.visualization.tables import derivations_table, matrix_table, tree_view
from phylotutor.visualization.utils import format_distance

console = Console()


@dataclass
class UPGMAConfig:
    """Configuration for the UPGMA pipeline."""

    # Input: exactly one source
    sequences_path: Optional[str] = None
    matrix_path: Optional[str] = None
    use_example: bool = False
    names: Optional[List[str]] = None  # Overrides names read from the input file

    # Output
    outdir: Optional[str] = None

    # Flat clusters
    n_clusters: Optional[int] = None
    cut_distance: Optional[float] = None

    # Display
    show_fractions: bool = True
    decimals: int = 2
    verbose: bool = True


class UPGMAPipeline:
    """Orchestrates input, distance matrix, clustering, analysis and export."""

    def __init__(self, config: UPGMAConfig):
        self.config = config
        self.console = console if config.verbose else Console(quiet=True)
        validate_config(config, console=self.console)
        self.outdir = Path(config.outdir) if config.outdir else None

        self.results: Dict[str, Any] = {
            'step_1_input': {},
            'step_2_matrix': {},
            'step_3_upgma': {},
            'step_4_analysis': {},
            'step_5_export': {},
        }

    def run(self):
        """Execute the full pipeline."""
        self.console.print("[bold cyan]═══════════════════════════════════════════════════════════[/bold cyan]")
        self.console.print("[bold cyan]PhyloTutor - UPGMA Clustering[/bold cyan]")
        self.console.print("[bold cyan]═══════════════════════════════════════════════════════════[/bold cyan]\n")
        print_config_summary(self.config, console=self.console)

        try:
            self._step_1_input()
            self._step_2_distance_matrix()
            self._step_3_upgma_clustering()
            self._step_4_analysis()
            if self.outdir is not None:
                self._step_5_export()
        except Exception as e:
            self.console.print(f"\n[bold red]✗[/bold red] Pipeline failed: {escape(str(e))}")
            raise

        self.console.print("\n[bold green]✓[/bold green] Pipeline completed successfully!")
        if self.outdir is not None:
            self.console.print(f"[bold]Output directory:[/bold] {escape(str(self.outdir))}")
        return self.results

    def _banner(self, title):
        self.console.print(f"\n[bold]{title}[/bold]")
        self.console.print("─" * 60)

    def _step_1_input(self):
        """Step 1: Load sequences or a distance grid."""
        self._banner("STEP 1: Input")
        cfg = self.config

        if cfg.matrix_path:
            grid, names = read_distance_grid(cfg.matrix_path)
            self.console.print(f"  Loaded {len(grid)}x{len(grid)} distance grid from {escape(str(cfg.matrix_path))}")
            self.results['step_1_input'] = {'source': 'matrix', 'grid': grid, 'names': cfg.names or names}
            return

        if cfg.sequences_path:
            sequences, names = read_sequences(cfg.sequences_path)
            self.console.print(f"  Loaded {len(sequences)} sequences from {escape(str(cfg.sequences_path))}")
        else:
            sequences, names = list(EXAMPLE_SEQUENCES), None
            self.console.print(f"  Using built-in example ({len(sequences)} sequences)")
        self.results['step_1_input'] = {'source': 'sequences', 'sequences': sequences, 'names': cfg.names or names}

    def _step_2_distance_matrix(self):
        """Step 2: Build the initial distance matrix."""
        self._banner("STEP 2: Distance Matrix")
        step_input = self.results['step_1_input']

        if step_input['source'] == 'matrix':
            matrix = build_matrix_from_grid(step_input['grid'], names=step_input['names'])
        else:
            matrix = build_matrix_from_sequences(step_input['sequences'], names=step_input['names'])
            self.console.print("  Pairwise Hamming distances computed")

        self.console.print(matrix_table(
            matrix, exact=self.config.show_fractions, decimals=self.config.decimals, title='Initial distances',
        ))
        self.results['step_2_matrix'] = {'matrix': matrix}

    def _step_3_upgma_clustering(self):
        """Step 3: UPGMA clustering with per-step derivations."""
        self._banner("STEP 3: UPGMA Clustering")
        matrix = self.results['step_2_matrix']['matrix']
        exact = self.config.show_fractions
        decimals = self.config.decimals

        result = cluster_upgma(matrix)

        for step in result.steps:
            self.console.print(f"\n  [bold]Step {step.number}:[/bold] {escape(step.description)}")
            self.console.print(matrix_table(step.matrix, highlight=step.pair, exact=exact, decimals=decimals))
            self.console.print(
                f"  → {escape(step.pair[0])} + {escape(step.pair[1])} = {escape(step.new_cluster)} "
                f"(height {format_distance(step.height, decimals=decimals, exact=exact)})"
            )
            if step.derivations:
                self.console.print(derivations_table(step, exact=exact, decimals=decimals))

        self.console.print("\n  [bold]Tree:[/bold]")
        self.console.print(tree_view(result.tree, decimals=decimals))
        self.console.print(f"  [green]✓[/green] {len(result.steps)} merges for {len(matrix)} taxa")

        self.results['step_3_upgma'] = {
            'result': result,
            'steps': result.steps,
            'tree': result.tree,
        }

    def _step_4_analysis(self):
        """Step 4: Merge-height statistics and optional flat clusters."""
        self._banner("STEP 4: Analysis")
        result = self.results['step_3_upgma']['result']
        Z = linkage_matrix(result)
        analysis = analyze_dendrogram(result)

        self.console.print(f"  Taxa: {analysis['n_taxa']}")
        self.console.print(f"  Merge distance range: {analysis['min_distance']:.2f} - {analysis['max_distance']:.2f}")
        self.console.print(f"  Root height: {analysis['root_height']:.2f}")
        self.console.print(f"  Leaf order: {escape(', '.join(analysis['leaf_order']))}")

        clusters = {}
        labels = result.matrix.labels
        if self.config.cut_distance is not None:
            assignment = get_clusters_at_distance(Z, self.config.cut_distance)
            clusters['cut_distance'] = dict(zip(labels, assignment.tolist()))
            self.console.print(f"  Clusters at distance {self.config.cut_distance}: {len(set(assignment))}")
        if self.config.n_clusters is not None:
            assignment = get_clusters_at_level(Z, self.config.n_clusters)
            clusters['n_clusters'] = dict(zip(labels, assignment.tolist()))
            self.console.print(f"  Requested {self.config.n_clusters} clusters: {len(set(assignment))} formed")

        self.results['step_4_analysis'] = {
            'linkage': Z,
            'analysis': analysis,
            'clusters': clusters,
        }

    def _step_5_export(self):
        """Step 5: Write tables and tree to the output directory."""
        self._banner("STEP 5: Export")
        self.outdir.mkdir(parents=True, exist_ok=True)
        result = self.results['step_3_upgma']['result']

        paths = {
            'distance_matrix': self.outdir / 'distance_matrix.csv',
            'steps': self.outdir / 'upgma_steps.csv',
            'derivations': self.outdir / 'upgma_derivations.csv',
            'newick': self.outdir / 'upgma_tree.nwk',
        }
        result.matrix.to_fraction_frame().to_csv(paths['distance_matrix'])
        result.steps_frame().to_csv(paths['steps'], index=False)
        result.derivations_frame().to_csv(paths['derivations'], index=False)
        paths['newick'].write_text(result.tree.to_newick() + '\n')

        for path in paths.values():
            self.console.print(f"  [green]✓[/green] Saved {escape(str(path))}")
        self.results['step_5_export'] = {key: str(path) for key, path in paths.items()}


def run_pipeline(config: UPGMAConfig) -> Dict[str, Any]:
    """Run the complete UPGMA pipeline.

    Parameters:
        config: UPGMAConfig object with pipeline settings

    Returns:
        dict: Results from all steps
    """
    pipeline = UPGMAPipeline(config)
    return pipeline.run()


__all__ = [
    'UPGMAConfig',
    'UPGMAPipeline',
    'run_pipeline',
]
