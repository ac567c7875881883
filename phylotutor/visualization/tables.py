"""Terminal rendering of UPGMA matrices, steps and trees with rich."""

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from phylotutor.visualization.utils import format_distance, natural_key


def matrix_table(matrix, highlight=None, exact=True, decimals=2, title=None):
    """Build a rich Table for a DistanceMatrix.

    Parameters:
        matrix: DistanceMatrix to render
        highlight: optional pair of labels whose cells are emphasised
        exact: show exact fractions instead of rounded decimals
        decimals: decimal places when ``exact`` is False
    """
    labels = sorted(matrix.labels, key=natural_key)
    pair = set(highlight or ())

    table = Table(title=title, show_lines=False)
    table.add_column('', style='bold')
    for label in labels:
        table.add_column(escape(label), justify='right')

    for row in labels:
        cells = []
        for col in labels:
            text = format_distance(matrix[row, col], decimals=decimals, exact=exact)
            if row != col and {row, col} == pair:
                text = f"[bold red]{text}[/bold red]"
            cells.append(text)
        table.add_row(escape(row), *cells)
    return table


def derivations_table(step, exact=True, decimals=2):
    """Table of the new distances computed at one merge step."""
    table = Table(show_header=True)
    table.add_column('Distance')
    table.add_column('Calculation')
    table.add_column('Result', justify='right')
    for derivation in step.derivations:
        result = format_distance(derivation.result, decimals=decimals, exact=exact)
        table.add_row(
            escape(f"d({step.new_cluster}, {derivation.taxon})"),
            escape(derivation.expression),
            f"{result} (≈ {derivation.decimal:.2f})",
        )
    return table


def tree_view(node, decimals=2):
    """Text dendrogram of a ClusterNode as a rich Tree."""
    def label(n):
        if n.is_leaf:
            return f"[green]{escape(n.name)}[/green]"
        return f"{escape(n.name)} [dim]height={format_distance(n.height, decimals=decimals, exact=False)}[/dim]"

    root = Tree(label(node))
    stack = [(node, root)]
    while stack:
        current, branch = stack.pop()
        for child in current.children:
            child_branch = branch.add(label(child))
            stack.append((child, child_branch))
    return root


__all__ = ['matrix_table', 'derivations_table', 'tree_view']
