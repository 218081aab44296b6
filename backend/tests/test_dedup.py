from types import SimpleNamespace

from app.services.dedup import dedupe_targets


def test_same_target_from_two_paths_is_kept_once() -> None:
    shared = SimpleNamespace(id=1, amount=100)
    direct = [shared, SimpleNamespace(id=2, amount=50)]
    created_for = [SimpleNamespace(id=1, amount=100), SimpleNamespace(id=3, amount=25)]
    rows = dedupe_targets(direct, created_for)
    assert [row.id for row in rows] == [1, 2, 3]
    assert rows[0] is shared


def test_distinct_targets_for_same_period_are_both_kept() -> None:
    rows = dedupe_targets([SimpleNamespace(id=4, month=1, year=2024), SimpleNamespace(id=5, month=1, year=2024)])
    assert len(rows) == 2


def test_no_sources() -> None:
    assert dedupe_targets() == []
    assert dedupe_targets([], []) == []
