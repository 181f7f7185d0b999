import json

import pytest

from mealplan_core.cli import main


@pytest.fixture
def catalog_file(tmp_path, make_catalog):
    data = {
        "user_id": "demo",
        "preferences": {"cuisine_variety_weight": 0},
        "recipes": [r.to_dict() for r in make_catalog()],
    }
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_generate_json_output_and_state_file(catalog_file, tmp_path, capsys):
    state_path = tmp_path / "state" / "rotation.json"
    argv = ["generate", str(catalog_file), "--seed", "3", "--today", "2026-08-01", "--state", str(state_path), "--json"]

    assert main(argv) == 0
    first = json.loads(capsys.readouterr().out)
    assert first["user_id"] == "demo"
    assert len(first["weeks"]) == 5
    assert first["rotation_state"]["cycle_number"] == 5
    assert json.loads(state_path.read_text(encoding="utf-8"))["cycle_number"] == 5

    assert main(argv) == 0
    second = json.loads(capsys.readouterr().out)
    assert second["rotation_state"]["cycle_number"] == 10


def test_generate_text_output(catalog_file, capsys):
    assert main(["generate", str(catalog_file), "--seed", "1", "--today", "2026-08-01", "--user", "ana"]) == 0
    out = capsys.readouterr().out
    assert "Semana 2026-08-03" in out
    assert "main_course" in out


def test_insufficient_catalog_exits_with_error(tmp_path, make_catalog, capsys):
    path = tmp_path / "mains.json"
    path.write_text(json.dumps([r.to_dict() for r in make_catalog(appetizers=0, desserts=0)]), encoding="utf-8")

    assert main(["generate", str(path), "--today", "2026-08-01"]) == 1
    assert "❌" in capsys.readouterr().err


def test_invalid_state_file_exits_with_error(catalog_file, tmp_path, capsys):
    state_path = tmp_path / "rotation.json"
    state_path.write_text('{"cycle_number": -3}', encoding="utf-8")

    assert main(["generate", str(catalog_file), "--today", "2026-08-01", "--state", str(state_path)]) == 1
    assert "cycle_number" in capsys.readouterr().err


def test_recipe_without_id_is_reported_not_raised(tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps([{"course_type": "main_course", "name": "Sin id"}]), encoding="utf-8")

    assert main(["generate", str(path), "--today", "2026-08-01"]) == 1
    err = capsys.readouterr().err
    assert "❌" in err
    assert "receta #0" in err
    assert "'id'" in err


def test_unknown_course_type_is_reported_not_raised(tmp_path, make_catalog, capsys):
    entries = [r.to_dict() for r in make_catalog()]
    entries.append({"id": "brunch-1", "course_type": "brunch"})
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(entries), encoding="utf-8")

    assert main(["generate", str(path), "--today", "2026-08-01"]) == 1
    assert "receta #21" in capsys.readouterr().err


def test_malformed_json_is_reported_not_raised(tmp_path, capsys):
    path = tmp_path / "catalog.json"
    path.write_text("{not json", encoding="utf-8")

    assert main(["generate", str(path)]) == 1
    assert "Catálogo inválido" in capsys.readouterr().err
