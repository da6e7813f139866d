"""Validation options and their layering."""
from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ValidationOptions(BaseModel):
    """Flat record of switches controlling one validation call."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    validate_formats: bool = Field(True, alias="validateFormats")
    validate_formats_strict: bool = Field(False, alias="validateFormatsStrict")
    validate_format_extensions: bool = Field(True, alias="validateFormatExtensions")
    cast: bool = Field(False, alias="cast")
    additional_properties: bool = Field(True, alias="additionalProperties")
    cast_source: bool = Field(False, alias="castSource")
    apply_default_value: bool = Field(False, alias="applyDefaultValue")
    validate_default_value: bool = Field(False, alias="validateDefaultValue")
    exit_on_first_error: bool = Field(False, alias="exitOnFirstError")
    fail_on_first_error: bool = Field(False, alias="failOnFirstError")
    strict_pattern_properties: bool = Field(False, alias="strictPatternProperties")

    @property
    def halts_on_error(self) -> bool:
        return self.exit_on_first_error or self.fail_on_first_error

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> "ValidationOptions":
        """Return a copy with ``overrides`` applied field by field."""
        if not overrides:
            return self
        aliases = {field.alias: name for name, field in type(self).model_fields.items() if field.alias}
        values = self.model_dump()
        for key, value in overrides.items():
            values[aliases.get(key, key)] = value
        try:
            return type(self)(**values)
        except ValidationError as exc:
            raise ValueError(f"Invalid validation options: {exc}") from exc


def mixin(target: Dict[str, Any], *sources: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow-merge each source into ``target``; later sources win."""
    for source in sources:
        if not source:
            continue
        if not isinstance(source, Mapping):
            raise TypeError("mixin non-object")
        for key, value in source.items():
            target[key] = value
    return target


def load_options(path: Path) -> ValidationOptions:
    """Read options from a TOML or YAML file, top level or under `options`."""
    if not path.exists():
        raise FileNotFoundError(f"Options file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".toml":
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    elif suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        raise ValueError(f"Unsupported options file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise ValueError(f"Options file must hold a mapping: {path}")
    section = data.get("options", data)
    return ValidationOptions().merged(section)
