import orjson
import pytest

from conformity.main import main

SCHEMA = {
    "properties": {
        "title": {"type": "string", "required": True},
        "count": {"type": "integer", "minimum": 1},
    }
}


def _write(path, payload):
    path.write_bytes(orjson.dumps(payload))
    return path


def _run(tmp_path, *argv):
    with pytest.raises(SystemExit) as excinfo:
        main(["--logging", str(tmp_path / "no-logging.yaml"), *argv])
    return excinfo.value.code


def test_validate_reports_errors_as_json(tmp_path, capsys):
    schema = _write(tmp_path / "schema.json", SCHEMA)
    data = _write(tmp_path / "data.json", {"count": 0})
    assert _run(tmp_path, "validate", str(schema), str(data)) == 1
    report = orjson.loads(capsys.readouterr().out)
    assert report["valid"] is False
    assert [error["attribute"] for error in report["errors"]] == ["required", "minimum"]
    assert report["errors"][1]["path"] == "$.count"


def test_validate_valid_document(tmp_path, capsys):
    schema = _write(tmp_path / "schema.json", SCHEMA)
    data = _write(tmp_path / "data.json", {"title": "hello", "count": 3})
    assert _run(tmp_path, "validate", str(schema), str(data)) == 0
    assert orjson.loads(capsys.readouterr().out) == {"valid": True, "errors": []}


def test_set_overrides_options(tmp_path, capsys):
    schema = _write(tmp_path / "schema.json", SCHEMA)
    data = _write(tmp_path / "data.json", {"count": 0})
    assert _run(tmp_path, "validate", str(schema), str(data), "--set", "exitOnFirstError=true") == 1
    report = orjson.loads(capsys.readouterr().out)
    assert len(report["errors"]) == 1


def test_fail_on_first_error_prints_single_error(tmp_path, capsys):
    schema = _write(tmp_path / "schema.json", SCHEMA)
    data = _write(tmp_path / "data.json", {"count": 0})
    assert _run(tmp_path, "validate", str(schema), str(data), "--set", "failOnFirstError=true") == 1
    report = orjson.loads(capsys.readouterr().out)
    assert report["valid"] is False
    assert [error["attribute"] for error in report["errors"]] == ["required"]


def test_options_file_is_applied(tmp_path, capsys):
    schema = _write(tmp_path / "schema.json", SCHEMA)
    data = _write(tmp_path / "data.json", {"title": "hello", "count": "3"})
    options = tmp_path / "options.toml"
    options.write_text("[options]\ncast = true\n", encoding="utf-8")
    assert _run(tmp_path, "validate", str(schema), str(data), "--options", str(options)) == 0
    assert orjson.loads(capsys.readouterr().out)["valid"] is True


def test_missing_file_exits_with_message(tmp_path):
    schema = _write(tmp_path / "schema.json", SCHEMA)
    code = _run(tmp_path, "validate", str(schema), str(tmp_path / "missing.json"))
    assert "File not found" in code


def test_unknown_option_exits_with_message(tmp_path):
    schema = _write(tmp_path / "schema.json", SCHEMA)
    data = _write(tmp_path / "data.json", {})
    code = _run(tmp_path, "validate", str(schema), str(data), "--set", "bogus=1")
    assert code.startswith("Validation could not run")


def test_formats_command_lists_registries(tmp_path, capsys):
    assert _run(tmp_path, "formats") == 0
    listing = orjson.loads(capsys.readouterr().out)
    assert "email" in listing["formats"]
    assert listing["extensions"] == ["url"]
