import io
import json
import zipfile

import pytest

from sheet_plotter.core import EmptyExport, EmptyHistory, PlotMode, SheetData, ValidationFault
from sheet_plotter.pipelines import PlotSession

ROWS = [
    {"Name": "Plot A", "Lat1": "1.0", "Lng1": "1.0", "Lat2": "1.0", "Lng2": "1.001", "Lat3": "1.001", "Lng3": "1.001"},
    {"Name": "Plot B", "Lat1": "2.0", "Lng1": "2.0", "Lat2": "2.0", "Lng2": "2.002"},
    {"Name": "Plot C"},
]
COLUMNS = ["Name", "Lat1", "Lng1", "Lat2", "Lng2", "Lat3", "Lng3"]


@pytest.fixture()
def session() -> PlotSession:
    session = PlotSession.default()
    session.load_sheet(SheetData(rows=ROWS, columns=COLUMNS, source_name="plots.csv"))
    session.add_point()
    for index in range(3):
        session.assign_column(index, "lat", f"Lat{index + 1}")
        session.assign_column(index, "lng", f"Lng{index + 1}")
    return session


def test_loading_a_sheet_starts_with_two_blank_points():
    session = PlotSession.default()
    session.load_sheet(SheetData(rows=ROWS, columns=COLUMNS))

    assert [config.as_dict() for config in session.point_configs] == [
        {"id": 1, "lat_column": "", "lng_column": ""},
        {"id": 2, "lat_column": "", "lng_column": ""},
    ]


def test_cannot_remove_below_two_points(session):
    session.remove_last_point()

    with pytest.raises(ValidationFault):
        session.remove_last_point()
    assert len(session.point_configs) == 2


def test_assign_column_validates_input(session):
    with pytest.raises(ValidationFault):
        session.assign_column(0, "alt", "Lat1")
    with pytest.raises(ValidationFault):
        session.assign_column(5, "lat", "Lat1")
    with pytest.raises(ValidationFault):
        session.assign_column(0, "lat", "Elevation")


def test_plot_appends_features_and_renders_them(session):
    result = session.plot()

    assert (result.plotted_count, result.skipped_count) == (1, 2)
    assert [feature.id for feature in session.features] == [1]
    assert len(session.layers) == 1
    assert session.layers.renderer.viewport is not None
    assert session.status()["plotted"] == 1


def test_batches_are_additive(session):
    session.plot()
    session.set_mode("distance")
    session.plot()

    assert [(feature.type, feature.id) for feature in session.features] == [
        (PlotMode.AREA, 1),
        (PlotMode.PATH, 1),
        (PlotMode.PATH, 2),
    ]
    assert len(session.layers) == 3
    assert len(session.layers.handles_for(1)) == 2


def test_incomplete_configuration_leaves_session_unchanged(session):
    session.plot()
    session.add_point()

    with pytest.raises(ValidationFault):
        session.plot()

    assert len(session.features) == 1
    assert session.history.depths() == {"undo": 1, "redo": 0}


def test_undo_and_redo_swap_features_and_layers(session):
    session.plot()
    session.set_mode(PlotMode.PATH)
    session.plot()
    after = list(session.features)

    session.undo()
    assert [feature.type for feature in session.features] == [PlotMode.AREA]
    assert len(session.layers.renderer.layers) == 1

    session.redo()
    assert session.features == after
    assert len(session.layers.renderer.layers) == 3


def test_undo_without_history_raises(session):
    with pytest.raises(EmptyHistory):
        session.undo()


def test_clear_all_drops_features_layers_and_history(session):
    session.plot()

    session.clear_all()

    assert session.features == []
    assert session.layers.renderer.layers == {}
    assert session.history.depths() == {"undo": 0, "redo": 0}


def test_exports_use_the_live_collection(session):
    with pytest.raises(EmptyExport):
        session.export_kml()

    session.set_mode("distance")
    session.plot()

    assert "Distance 2" in session.export_kml()
    with zipfile.ZipFile(io.BytesIO(session.export_bundle())) as archive:
        geojson = json.loads(archive.read(session.bundle_exporter.geojson_filename))
        header = archive.read("attributes.csv").decode("utf-8").splitlines()[0]
    assert [feature["properties"]["Name"] for feature in geojson["features"]] == ["Plot A", "Plot B"]
    assert header.endswith(",".join(f'"{column}"' for column in COLUMNS))


def test_summaries_describe_each_feature(session):
    session.plot()

    (entry,) = session.summaries()
    assert (entry["id"], entry["type"], entry["title"]) == (1, "area", "Area 1")
    assert entry["detail"].startswith("3 points, ")
    assert entry["detail"].endswith(" sq km")


def test_viewport_is_cleared_when_no_features_remain(session):
    session.plot()
    assert session.layers.renderer.payload()["bounds"] is not None

    session.undo()

    assert session.layers.renderer.viewport is None
    assert session.layers.renderer.payload()["bounds"] is None

    session.redo()
    session.clear_all()
    assert session.layers.renderer.viewport is None
