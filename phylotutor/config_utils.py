"""Configuration validation and helper utilities for the UPGMA pipeline."""

from pathlib import Path
from rich.console import Console

console = Console()


def validate_config(config, console=console):
    """Validate a UPGMAConfig object.

    Parameters:
        config: UPGMAConfig instance
        console: rich Console used to report errors

    Raises:
        ValueError: If configuration is invalid
    """
    errors = []

    # Exactly one input source
    sources = [bool(config.sequences_path), bool(config.matrix_path), bool(config.use_example)]
    if sum(sources) != 1:
        errors.append("exactly one of sequences_path, matrix_path or use_example is required")

    for field_name in ('sequences_path', 'matrix_path'):
        path = getattr(config, field_name)
        if path and not Path(path).exists():
            errors.append(f"Input file not found: {path}")

    # Check numeric parameters
    if config.decimals < 0:
        errors.append("decimals must be >= 0")

    if config.n_clusters is not None and config.n_clusters < 1:
        errors.append("n_clusters must be >= 1")

    if config.cut_distance is not None and config.cut_distance < 0:
        errors.append("cut_distance must be >= 0")

    if errors:
        console.print("[bold red]Configuration Errors:[/bold red]")
        for error in errors:
            console.print(f"  ✗ {error}", markup=False)
        raise ValueError(f"Invalid configuration: {len(errors)} error(s)")


def print_config_summary(config, console=console):
    """Print a summary of the configuration."""
    if config.matrix_path:
        source = f"distance grid {config.matrix_path}"
    elif config.sequences_path:
        source = f"sequences {config.sequences_path}"
    else:
        source = "built-in example"

    console.print("\n[bold]Configuration Summary:[/bold]")
    console.print(f"  Input: {source}", markup=False)
    console.print(f"  Output: {config.outdir if config.outdir else 'none (terminal only)'}", markup=False)
    console.print("\n  [bold]Clusters:[/bold]")
    console.print(f"    cut_distance: {config.cut_distance if config.cut_distance is not None else 'none'}")
    console.print(f"    n_clusters: {config.n_clusters if config.n_clusters is not None else 'none'}")
    console.print("\n  [bold]Display:[/bold]")
    console.print(f"    fractions: {config.show_fractions}")
    console.print(f"    decimals: {config.decimals}")


__all__ = [
    'validate_config',
    'print_config_summary',
]
