from fractions import Fraction

import pytest

from phylotutor.cluster.tree import ClusterNode


def make_tree():
    a, b, c = ClusterNode("A"), ClusterNode("B"), ClusterNode("C")
    ab = ClusterNode("(A,B)", height=Fraction(1), children=(a, b))
    return ClusterNode("((A,B),C)", height=Fraction(3), children=(ab, c))


def test_leaf_and_internal_nodes():
    tree = make_tree()
    assert not tree.is_leaf
    assert tree.size == 3
    assert [n.name for n in tree.iter_nodes()] == ["A", "B", "(A,B)", "C", "((A,B),C)"]
    assert tree.leaf_order() == ["A", "B", "C"]
    assert [n.name for n in tree.internal_nodes()] == ["(A,B)", "((A,B),C)"]


def test_branch_lengths():
    lengths = make_tree().branch_lengths()
    assert lengths == {"A": 1, "B": 1, "(A,B)": 2, "C": 3}


def test_newick():
    assert make_tree().to_newick() == "((A:1,B:1):2,C:3);"
    uneven = ClusterNode("(X,Y)", height=Fraction(37, 6), children=(ClusterNode("X"), ClusterNode("Y")))
    assert uneven.to_newick() == "(X:6.166667,Y:6.166667);"


def test_find():
    tree = make_tree()
    assert tree.find("(A,B)").height == 1
    with pytest.raises(KeyError):
        tree.find("D")


def test_internal_node_needs_two_children():
    with pytest.raises(ValueError):
        ClusterNode("bad", height=Fraction(1), children=(ClusterNode("A"),))


def test_nodes_are_immutable():
    tree = make_tree()
    with pytest.raises(AttributeError):
        tree.height = Fraction(10)
