import pytest

from observasort.operators import CompareOp, InvalidOperatorError
from observasort.stats import Stats


@pytest.mark.parametrize("symbol, a, b, expected", [
    (">", 2, 1, True), (">=", 1, 1, True), ("<", 2, 1, False),
    ("<=", 3, 2, False), ("==", 4, 4, True), ("!=", 4, 4, False),
])
def test_apply(symbol, a, b, expected):
    assert CompareOp.parse(symbol).apply(a, b) is expected


def test_parse_accepts_members_and_rejects_unknown():
    assert CompareOp.parse(CompareOp.LE) is CompareOp.LE
    assert str(CompareOp.NE) == "!="
    for bad in ("=>", "<>", "", None):
        with pytest.raises(InvalidOperatorError):
            CompareOp.parse(bad)


def test_stats_reset_clears_counters_and_action():
    stats = Stats(reads=3, writes=2, comparisons=1, swaps=1, action="Swap 0 and 1")
    stats.reset()
    assert stats.snapshot() == dict(reads=0, writes=0, comparisons=0, swaps=0, action="")
