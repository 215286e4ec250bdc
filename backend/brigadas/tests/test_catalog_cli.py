from typer.testing import CliRunner

from brigadas.cli.catalog import DEFAULT_CATALOG, app

runner = CliRunner()


def test_seed_is_idempotent(equipment_catalog):
    first = runner.invoke(app, ["seed"])
    assert first.exit_code == 0
    expected = len(set(DEFAULT_CATALOG) - set(equipment_catalog))
    assert f"{expected} equipos agregados" in first.output

    second = runner.invoke(app, ["seed"])
    assert second.exit_code == 0
    assert "0 equipos agregados" in second.output


def test_add_and_list():
    added = runner.invoke(app, ["add", "Linterna", "Navaja"])
    assert added.exit_code == 0
    listed = runner.invoke(app, ["list"])
    assert listed.exit_code == 0
    names = listed.output.split()
    assert "Linterna" in names and "Navaja" in names
