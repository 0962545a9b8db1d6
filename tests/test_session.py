import pytest

from perfchart_dashboard import session
from perfchart_dashboard import selection as sel
from perfchart_dashboard.normalizer import Dataset
from perfchart_dashboard.session import SessionState
from perfchart_dashboard.zoom import ZoomWindow


@pytest.fixture
def loaded(file_a, file_b):
    return session.add_dataset(session.add_dataset(SessionState(), file_a), file_b)


def test_add_dataset_rebuilds_merged_table(loaded):
    assert [ds.name for ds in loaded.datasets] == ["A", "B"]
    assert loaded.merged == (
        {"Temps": 0, "A__Indicateur1": 10, "A__Indicateur1_Tache1": 5, "B__CHARGE_TOTALE": 80},
    )


def test_events_return_new_snapshots(file_a):
    empty = SessionState()
    loaded = session.add_dataset(empty, file_a)
    toggled = session.toggle_all(loaded)

    assert empty.datasets == ()
    assert loaded.selection == {}
    assert toggled is not loaded


def test_reupload_replaces_dataset_in_place(loaded):
    new_a = Dataset("A", ("Indicateur1",), ({"Temps": 1.0, "Indicateur1": 3.0},))
    state = session.add_dataset(loaded, new_a)

    assert [ds.name for ds in state.datasets] == ["A", "B"]
    assert state.dataset("A") == new_a
    assert [r["Temps"] for r in state.merged] == [0, 1.0]


def test_remove_dataset_drops_its_series(loaded):
    state = session.toggle_all(loaded)
    state = session.remove_dataset(state, "A")

    assert [ds.name for ds in state.datasets] == ["B"]
    assert state.merged == ({"Temps": 0, "B__CHARGE_TOTALE": 80},)
    assert state.selection == {"B__CHARGE_TOTALE": True}
    assert session.remove_dataset(state, "missing") is state


def test_file_toggle_selects_then_clears_every_key(loaded):
    state = session.toggle_file(loaded, "A")
    assert state.selection == {"A__Indicateur1": True, "A__Indicateur1_Tache1": True}

    state = session.toggle_file(state, "A")
    assert state.selection == {"A__Indicateur1": False, "A__Indicateur1_Tache1": False}


def test_group_and_main_indicator_toggles(loaded):
    state = session.toggle_group(loaded, "A", 0)
    assert sel.is_all_checked(state.selection, session.file_keys(loaded.dataset("A")))

    state = session.toggle_main_indicators(loaded, "B")
    assert state.selection == {"B__CHARGE_TOTALE": True}

    assert session.toggle_group(loaded, "missing", 0) is loaded
    assert session.toggle_group(loaded, "A", 5).selection == {}


def test_groups_with_the_same_label_toggle_separately():
    ds = Dataset("f", ("Indicateur1", "indicateur1"), ({"Temps": 0.0, "Indicateur1": 1.0, "indicateur1": 2.0},))
    state = session.add_dataset(SessionState(), ds)

    assert session.group_keys(ds, 0) == ["f__Indicateur1"]
    assert session.group_keys(ds, 1) == ["f__indicateur1"]
    assert session.apply_toggle(state, ["group", "f", 1]).selection == {"f__indicateur1": True}


def test_selected_series_in_selection_order(loaded):
    state = session.toggle_series(loaded, "B__CHARGE_TOTALE")
    state = session.toggle_series(state, "A__Indicateur1")
    assert session.selected_series(state) == ["B__CHARGE_TOTALE", "A__Indicateur1"]


def test_adding_a_file_keeps_zoom_window(file_a, file_b):
    state = session.add_dataset(SessionState(), file_a)
    state = session.zoom_select(state, 10, 20)
    state = session.add_dataset(state, file_b)
    assert state.zoom.window == ZoomWindow(10.0, 20.0)


def test_zoom_events(loaded):
    state = session.zoom_press(loaded, 4)
    state = session.zoom_move(state, 2)
    state = session.zoom_release(state)
    assert state.zoom.window == ZoomWindow(2.0, 4.0)
    assert session.zoom_reset(state).zoom.window is None


def test_apply_toggle_actions(loaded):
    assert session.apply_toggle(loaded, ["all"]).selection == session.toggle_all(loaded).selection
    assert session.apply_toggle(loaded, ["file", "B"]).selection == {"B__CHARGE_TOTALE": True}
    assert session.apply_toggle(loaded, ["main", "A"]).selection == {"A__Indicateur1": True}
    assert session.apply_toggle(loaded, ["group", "A", 0]).selection == {
        "A__Indicateur1": True,
        "A__Indicateur1_Tache1": True,
    }
    assert session.apply_toggle(loaded, ["one", "A__Indicateur1_Tache1"]).selection == {
        "A__Indicateur1_Tache1": True,
    }
    with pytest.raises(ValueError):
        session.apply_toggle(loaded, ["bogus"])


def test_dict_round_trip(loaded):
    state = session.zoom_select(session.toggle_file(loaded, "A"), 0, 5)
    restored = SessionState.from_dict(state.to_dict())
    assert restored == state
    assert SessionState.from_dict(None) == SessionState()
