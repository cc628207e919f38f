import json

import pytest

from erdiagram import cli

from conftest import entity, relation


@pytest.fixture
def data_file(tmp_path, shop):
    path = tmp_path / "shop.json"
    path.write_text(json.dumps(shop))
    return path


def run(capsys, *argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(list(argv))
    return excinfo.value.code, json.loads(capsys.readouterr().out)


def test_layout(capsys, data_file):
    code, out = run(capsys, "layout", str(data_file), "--strategy", "spectral", "--width", "1000")

    assert code == 0
    assert out["strategy"] == "spectral"
    assert out["diagram"]["width"] == 1000
    assert len(out["diagram"]["nodes"]) == 5


def test_layout_elastic_options(capsys, data_file):
    code, out = run(capsys, "layout", str(data_file), "--options", '{"iterations": 5}', "--seed", "1")

    assert code == 0
    assert out["iterations"] <= 5


def test_layout_bad_options(capsys, data_file):
    code, out = run(capsys, "layout", str(data_file), "--options", '{"damping": 7}')

    assert code == 1
    assert out["status"] == "error"


def test_navigate(capsys, data_file):
    code, out = run(capsys, "navigate", str(data_file), "--entity", "Order")

    assert code == 0
    assert out["partition"]["predecessors"] == ["Invoice", "LineItem"]


def test_navigate_unknown_entity(capsys, data_file):
    code, out = run(capsys, "navigate", str(data_file), "--entity", "Supplier")

    assert code == 1
    assert out == {"status": "error", "error": "Entity not found: Supplier"}


def test_reference_error(capsys, tmp_path, customer_order):
    customer_order["relationships"].append(relation("Order.id", "Supplier.id"))
    path = tmp_path / "broken.json"
    path.write_text(json.dumps(customer_order))

    code, out = run(capsys, "layout", str(path))

    assert code == 1
    assert out["error"] == "Entity not found: Supplier"


def test_missing_file(capsys, tmp_path):
    code, out = run(capsys, "validate", str(tmp_path / "nothing.json"))

    assert code == 1
    assert out["status"] == "error"


def test_invalid_json(capsys, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")

    code, out = run(capsys, "summarize", str(path))

    assert code == 1
    assert "Invalid JSON" in out["error"]


def test_utf8_input(capsys, tmp_path):
    path = tmp_path / "straße.json"
    data = {
        "entities": {"Straße": entity("id"), "Gebäude": entity("id", "straßeId")},
        "relationships": [relation("Gebäude.straßeId", "Straße.id")],
    }
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    code, out = run(capsys, "summarize", str(path))

    assert code == 0
    assert out["summary"]["total_entities"] == 2


def test_validate(capsys, data_file):
    code, out = run(capsys, "validate", str(data_file))

    assert code == 0
    assert out["summary"]["valid"]


def test_summarize(capsys, data_file):
    code, out = run(capsys, "summarize", str(data_file), "--top", "1")

    assert code == 0
    assert [e["name"] for e in out["summary"]["most_connected_entities"]] == ["Order"]
