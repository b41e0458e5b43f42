import pytest

from walkassist.logic.stability import StabilityFilter, stable_label


def test_majority_label_wins():
    history = ["dog", "dog", "dog", "cat", "nothing"]
    assert stable_label(history, 0.4) == "dog"


def test_no_label_reaches_threshold():
    history = ["dog", "cat", "bus", "car", "person", "bench"]
    assert stable_label(history, 0.4) == "nothing"


def test_label_exactly_at_threshold_is_stable():
    # 2 of 5 with ratio 0.4 -> threshold 2.0
    assert stable_label(["a", "b", "a", "c", "d"], 0.4) == "a"


@pytest.mark.parametrize("n", [1, 3, 6, 8])
def test_any_history_with_enough_votes(n):
    ratio = 0.5
    needed = -(-n // 2)  # ceil(n * 0.5)
    history = ["chair"] * needed + [f"other{i}" for i in range(n - needed)]
    assert stable_label(history, ratio) == "chair"


def test_empty_history():
    assert stable_label([], 0.4) == "nothing"


def test_ties_are_deterministic():
    history = ["cat", "dog", "cat", "dog"]
    first = stable_label(history, 0.4)
    assert first == "cat"
    assert all(stable_label(history, 0.4) == first for _ in range(10))


def test_filter_evicts_oldest():
    stability = StabilityFilter(maxlen=3, ratio=0.5)
    for label in ["dog", "dog", "cat", "cat", "cat"]:
        stability.add(label)
        assert len(stability.history) <= 3
    assert stability.history == ["cat", "cat", "cat"]
    assert stability.stable_label() == "cat"


def test_filter_clear():
    stability = StabilityFilter(maxlen=4)
    stability.add("dog")
    stability.clear()
    assert stability.history == []
    assert stability.stable_label() == "nothing"


def test_filter_rejects_zero_capacity():
    with pytest.raises(ValueError):
        StabilityFilter(maxlen=0)
