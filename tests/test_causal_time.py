import pytest

from ossa.causal_time import (
    AtTime,
    CurrentTime,
    at_time,
    concretize_lww,
    concretize_twopmap_op,
    current_time,
)
from ossa.lww import LWW
from ossa.twopmap import TwoPMapApply, TwoPMapDelete, TwoPMapInsert


def resolve(t, header):
    if isinstance(t, CurrentTime):
        return (header, t.operation_position)
    return t.time


def keep(x, header):
    return x


def test_constructors():
    assert current_time(3) == CurrentTime(3)
    assert at_time("x") == AtTime("x")
    assert current_time(3) != at_time(3)


def test_operation_position_bounds():
    assert current_time(255).operation_position == 255
    with pytest.raises(ValueError):
        current_time(256)
    with pytest.raises(ValueError):
        current_time(-1)


def test_current_orders_before_concrete():
    assert current_time(200) < at_time(0)
    assert at_time(0) > current_time(200)
    assert sorted([at_time(2), current_time(1), at_time(1), current_time(0)]) == [
        current_time(0),
        current_time(1),
        at_time(1),
        at_time(2),
    ]


def test_order_within_variant():
    assert current_time(1) < current_time(2)
    assert at_time("a") <= at_time("a")
    assert at_time("b") >= at_time("a")


def test_concretize_lww_current():
    result = concretize_lww(LWW(current_time(4), "v"), "h1", resolve)
    assert result == LWW(("h1", 4), "v")


def test_concretize_lww_concrete_time_unchanged():
    result = concretize_lww(LWW(at_time(("h0", 2)), "v"), "h1", resolve)
    assert result == LWW(("h0", 2), "v")


def test_concretize_twopmap_insert():
    src = TwoPMapInsert(current_time(0), LWW(current_time(1), "x"))
    result = concretize_twopmap_op(
        src, "h", resolve, lambda v, h: concretize_lww(v, h, resolve), keep
    )
    assert result == TwoPMapInsert(("h", 0), LWW(("h", 1), "x"))


def test_concretize_twopmap_apply():
    src = TwoPMapApply(at_time(("g", 0)), LWW(current_time(2), "y"))
    result = concretize_twopmap_op(
        src, "h", resolve, keep, lambda o, h: concretize_lww(o, h, resolve)
    )
    assert result == TwoPMapApply(("g", 0), LWW(("h", 2), "y"))


def test_concretize_twopmap_delete():
    result = concretize_twopmap_op(TwoPMapDelete(current_time(7)), "h", resolve, keep, keep)
    assert result == TwoPMapDelete(("h", 7))


def test_concretize_twopmap_unknown_op():
    with pytest.raises(TypeError):
        concretize_twopmap_op(LWW(current_time(0), 1), "h", resolve, keep, keep)