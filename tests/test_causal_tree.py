import pytest

from ossa.causal_tree import Atom, CausalTree, CausalTreeOp, LetterKind
from ossa.crdt import CausalState


class TotalOrder(CausalState):
    def happens_before(self, t1, t2):
        return t1 < t2


class NoOrder(CausalState):
    def happens_before(self, t1, t2):
        return False


STATE = TotalOrder()


def letter(i, value):
    return Atom(i, LetterKind.LETTER, value)


def test_new_root():
    tree = CausalTree.new_root(0)
    assert tree.atom == Atom(0, LetterKind.ROOT)
    assert tree.children == ()


def test_insert_under_root():
    tree = CausalTree.new_root(0).apply(STATE, CausalTreeOp(0, letter(1, "a")))
    assert [c.atom for c in tree.children] == [letter(1, "a")]


def test_insert_nested():
    tree = CausalTree.new_root(0)
    tree = tree.apply(STATE, CausalTreeOp(0, letter(1, "a")))
    tree = tree.apply(STATE, CausalTreeOp(1, letter(2, "b")))
    assert tree.children[0].children[0].atom == letter(2, "b")


def test_siblings_sorted_by_time():
    tree = CausalTree.new_root(0)
    for i in (3, 1, 2):
        tree = tree.apply(STATE, CausalTreeOp(0, letter(i, str(i))))
    assert [c.atom.id for c in tree.children] == [1, 2, 3]


def test_letters_precede_deletes():
    tree = CausalTree.new_root(0)
    tree = tree.apply(STATE, CausalTreeOp(0, Atom(2, LetterKind.DELETE)))
    tree = tree.apply(STATE, CausalTreeOp(0, letter(3, "x")))
    kinds = [c.atom.kind for c in tree.children]
    assert kinds == [LetterKind.LETTER, LetterKind.DELETE]


def test_concurrent_order_is_independent_of_apply_order():
    a = CausalTreeOp(0, letter(5, "a"))
    b = CausalTreeOp(0, letter(7, "b"))
    state = NoOrder()
    left = CausalTree.new_root(0).apply(state, a).apply(state, b)
    right = CausalTree.new_root(0).apply(state, b).apply(state, a)
    assert left == right


def test_duplicate_time_raises():
    tree = CausalTree.new_root(0).apply(STATE, CausalTreeOp(0, letter(1, "a")))
    with pytest.raises(ValueError):
        tree.apply(STATE, CausalTreeOp(0, letter(1, "b")))


def test_unknown_parent_raises():
    with pytest.raises(ValueError):
        CausalTree.new_root(0).apply(STATE, CausalTreeOp(99, letter(1, "a")))


def test_apply_does_not_mutate():
    root = CausalTree.new_root(0)
    root.apply(STATE, CausalTreeOp(0, letter(1, "a")))
    assert root.children == ()