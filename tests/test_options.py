import pytest

from conformity.config.options import ValidationOptions, load_options, mixin


def test_defaults_match_documented_table():
    options = ValidationOptions()
    assert options.validate_formats
    assert not options.validate_formats_strict
    assert options.validate_format_extensions
    assert not options.cast
    assert options.additional_properties
    assert not options.cast_source
    assert not options.apply_default_value
    assert not options.validate_default_value
    assert not options.exit_on_first_error
    assert not options.fail_on_first_error
    assert not options.strict_pattern_properties


def test_merged_accepts_aliases_and_field_names():
    options = ValidationOptions().merged({"castSource": True, "cast": True})
    assert options.cast and options.cast_source
    options = options.merged({"exit_on_first_error": True})
    assert options.exit_on_first_error
    assert options.halts_on_error


def test_merged_layers_later_keys_win():
    base = ValidationOptions().merged({"cast": True})
    call = base.merged({"cast": False, "castSource": True})
    assert not call.cast
    assert call.cast_source
    assert base.cast
    assert not base.cast_source
    assert base.merged(None) is base


def test_unknown_option_is_rejected():
    with pytest.raises(ValueError, match="Invalid validation options"):
        ValidationOptions().merged({"bogus": True})


def test_mixin_shallow_merges_in_order():
    target = {"a": 1}
    result = mixin(target, {"b": 2}, None, {"a": 3})
    assert result is target
    assert target == {"a": 3, "b": 2}
    with pytest.raises(TypeError, match="mixin non-object"):
        mixin({}, ["x"])


def test_load_options_from_toml(tmp_path):
    path = tmp_path / "options.toml"
    path.write_text("[options]\ncast = true\nexitOnFirstError = true\n", encoding="utf-8")
    options = load_options(path)
    assert options.cast
    assert options.exit_on_first_error
    assert options.validate_formats


def test_load_options_from_yaml_top_level(tmp_path):
    path = tmp_path / "options.yaml"
    path.write_text("castSource: true\nadditionalProperties: false\n", encoding="utf-8")
    options = load_options(path)
    assert options.cast_source
    assert not options.additional_properties


def test_load_options_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_options(tmp_path / "missing.toml")
    ini = tmp_path / "options.ini"
    ini.write_text("cast=true", encoding="utf-8")
    with pytest.raises(ValueError):
        load_options(ini)
