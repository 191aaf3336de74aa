import pytest

from sheet_plotter.core import AreaFeature, CoordinatePair, EmptyHistory, HistorySnapshot, PathFeature
from sheet_plotter.services.history import HistoryManager


def make_area(feature_id: int, name: str = "Plot") -> AreaFeature:
    return AreaFeature(
        id=feature_id,
        attributes={"Name": name},
        points=(CoordinatePair(1, 1), CoordinatePair(1, 2), CoordinatePair(2, 2)),
        area_sq_meters=1234.5,
    )


def make_path(feature_id: int) -> PathFeature:
    return PathFeature(
        id=feature_id,
        attributes={"Route": "North"},
        points=(CoordinatePair(1, 1), CoordinatePair(1, 2)),
        segment_distances=(111_178.0,),
        total_distance_meters=111_178.0,
    )


def test_undo_then_redo_round_trips_the_collection():
    history = HistoryManager()
    live = [make_area(1)]
    before = list(live)

    history.capture(live)
    live.append(make_path(2))
    after = list(live)

    live = history.undo(live)
    assert live == before

    live = history.redo(live)
    assert live == after


def test_both_feature_types_are_restored():
    history = HistoryManager()
    history.capture([make_area(1), make_path(2)])

    restored = history.undo([])

    assert [type(feature) for feature in restored] == [AreaFeature, PathFeature]
    assert restored[1].total_distance_meters == 111_178.0


def test_snapshot_is_independent_of_later_edits():
    history = HistoryManager()
    live = [make_area(1, "Original")]

    history.capture(live)
    live[0].attributes["Name"] = "Edited"

    restored = history.undo(live)
    assert restored[0].attributes["Name"] == "Original"


def test_restored_features_do_not_share_state_with_the_snapshot():
    snapshot = HistorySnapshot.capture([make_area(1, "Original")])

    restored = snapshot.restore()
    restored[0].attributes["Name"] = "Edited"

    assert snapshot.restore()[0].attributes["Name"] == "Original"


def test_undo_stack_is_bounded():
    history = HistoryManager(max_depth=20)

    for index in range(25):
        history.capture([make_area(index + 1)])

    assert len(history.undo_stack) == 20
    # oldest snapshots are evicted first
    assert history.undo_stack[0].features[0].id == 6


def test_capture_clears_redo():
    history = HistoryManager()
    history.capture([])
    history.undo([make_area(1)])
    assert history.can_redo

    history.capture([])

    assert not history.can_redo
    assert history.depths() == {"undo": 1, "redo": 0}


def test_redo_pushes_current_state_onto_the_undo_stack():
    history = HistoryManager()
    history.capture([])
    history.undo([make_area(1)])

    history.redo([])

    assert history.depths() == {"undo": 1, "redo": 0}


def test_empty_stacks_raise():
    history = HistoryManager()

    with pytest.raises(EmptyHistory):
        history.undo([])
    with pytest.raises(EmptyHistory):
        history.redo([])


def test_clear_empties_both_stacks():
    history = HistoryManager()
    history.capture([])
    history.capture([make_area(1)])
    history.undo([])

    history.clear()

    assert history.depths() == {"undo": 0, "redo": 0}
