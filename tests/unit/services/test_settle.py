"""
Tests for partial-failure aggregation.
"""

from catalog_importer.services import attempt_all


def half(n):
    if n % 2:
        raise ValueError(f"odd: {n}")
    return n // 2


class TestAttemptAll:
    def test_no_items(self):
        settled = attempt_all(half, [])

        assert settled.successes == []
        assert settled.failures == []
        assert not settled.all_failed

    def test_some_fail(self):
        settled = attempt_all(half, [2, 3, 4, 5])

        assert settled.successes == [1, 2]
        assert [item for item, _ in settled.failures] == [3, 5]
        assert isinstance(settled.failures[0][1], ValueError)
        assert not settled.all_failed

    def test_all_fail(self):
        settled = attempt_all(half, [1, 3])

        assert settled.successes == []
        assert settled.all_failed

    def test_every_item_attempted(self):
        seen = []

        def record(item):
            seen.append(item)
            raise RuntimeError("boom")

        attempt_all(record, ["a", "b", "c"])

        assert seen == ["a", "b", "c"]
