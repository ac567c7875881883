"""UPGMA clustering engine, cluster tree and post-clustering analysis."""

__all__ = ['upgma', 'tree', 'analysis']
