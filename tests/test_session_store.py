from sheet_plotter.api.sessions import SessionStore
from sheet_plotter.pipelines import PlotSession


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_idle_sessions_expire():
    clock = FakeClock()
    store = SessionStore(max_sessions=10, idle_seconds=60, clock=clock)
    store["stale"] = PlotSession.default()
    store["active"] = PlotSession.default()

    clock.now += 45
    assert store.get("active") is not None
    clock.now += 30

    assert store.get("stale") is None
    assert store.get("active") is not None
    assert len(store) == 1


def test_least_recently_used_session_is_evicted_at_capacity():
    store = SessionStore(max_sessions=2, idle_seconds=3600, clock=FakeClock())
    store["first"] = PlotSession.default()
    store["second"] = PlotSession.default()
    store.get("first")

    store["third"] = PlotSession.default()

    assert "second" not in store
    assert "first" in store and "third" in store
