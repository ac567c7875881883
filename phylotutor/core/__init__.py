"""Core input handling for UPGMA clustering.

Submodules:
- input: Sequence and distance-grid file loading
- distances: Distance matrix construction (Hamming / user grid)
"""

__all__ = ['input', 'distances']
