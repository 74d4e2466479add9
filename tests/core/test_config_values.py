from __future__ import annotations

import pytest

from recfmt.core.errors import ConfigurationError, ErrorKind
from recfmt.core.values import FormatConfig, Resolved, Unresolved, contains_macro


def test_macro_values_are_unresolved() -> None:
    cfg = FormatConfig.from_mapping({"path_field": "${pf}", "delimiter": "|", "skip": None})
    assert isinstance(cfg["path_field"], Unresolved)
    assert isinstance(cfg["delimiter"], Resolved)
    assert "skip" not in cfg
    assert cfg.unresolved_names() == ["path_field"]
    assert cfg.has_unresolved()
    assert cfg.has_unresolved("path_field", "schema")
    assert not cfg.has_unresolved("delimiter")


def test_get_on_unresolved_value_raises() -> None:
    cfg = FormatConfig({"schema": "${schema}"})
    with pytest.raises(ConfigurationError) as ei:
        cfg.get("schema")
    assert ei.value.kind is ErrorKind.UNRESOLVED_MACRO
    assert ei.value.context["option"] == "schema"


def test_resolve_keeps_whole_macro_type_and_substitutes_embedded() -> None:
    cfg = FormatConfig({"block_size": "${size}", "path_field": "file_${suffix}"})
    out = cfg.resolve({"size": 4096, "suffix": "name"})
    assert out.get("block_size") == 4096
    assert out.get("path_field") == "file_name"
    assert not out.has_unresolved()


def test_resolve_does_not_reparse_substituted_values() -> None:
    out = FormatConfig({"delimiter": "${d}"}).resolve({"d": "${literal}"})
    assert out.get("delimiter") == "${literal}"
    assert not out.is_unresolved("delimiter")


def test_resolve_missing_argument_raises() -> None:
    cfg = FormatConfig({"path_field": "${pf}"})
    with pytest.raises(ConfigurationError) as ei:
        cfg.resolve({})
    assert ei.value.kind is ErrorKind.UNRESOLVED_MACRO
    assert ei.value.context["macros"] == ["pf"]


def test_with_values_and_to_dict() -> None:
    cfg = FormatConfig({"a": 1}).with_values(b="${x}")
    assert cfg.to_dict() == {"a": 1, "b": "${x}"}
    assert contains_macro("x${y}z")
    assert not contains_macro("$y")
