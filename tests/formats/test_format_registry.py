from __future__ import annotations

import pytest

from recfmt.core.errors import ConfigurationError, ErrorKind
from recfmt.formats import (
    AVRO_FORMAT,
    TEXT_FORMAT,
    format_names,
    get_format,
    list_formats,
)


def test_registry_lists_all_formats_in_order() -> None:
    assert format_names() == ["text", "delimited", "parquet", "orc", "avro"]
    assert [d.name for d in list_formats()] == format_names()


def test_lookup_is_case_insensitive_and_accepts_descriptors() -> None:
    assert get_format("TEXT") is TEXT_FORMAT
    assert get_format(" text ") is TEXT_FORMAT
    assert get_format(TEXT_FORMAT) is TEXT_FORMAT


def test_unknown_format_raises() -> None:
    with pytest.raises(ConfigurationError) as ei:
        get_format("xml")
    assert ei.value.kind is ErrorKind.UNKNOWN_FORMAT
    assert ei.value.format_name == "xml"


def test_registry_is_read_only() -> None:
    from recfmt.formats import _FORMATS

    with pytest.raises(TypeError):
        _FORMATS["xml"] = TEXT_FORMAT  # type: ignore[index]
    with pytest.raises(TypeError):
        TEXT_FORMAT.options["new"] = None  # type: ignore[index]


def test_capabilities() -> None:
    caps = {d.name: (d.readable, d.writable) for d in list_formats()}
    assert caps == {
        "text": (True, False),
        "delimited": (True, True),
        "parquet": (True, True),
        "orc": (True, True),
        "avro": (False, True),
    }
    assert TEXT_FORMAT.offset_field == "offset"
    assert AVRO_FORMAT.options["schema"].required is True


def test_every_option_has_type_and_description() -> None:
    for d in list_formats():
        for name, spec in d.options.items():
            assert spec.name == name
            assert spec.type in ("string", "long", "int", "boolean")
            assert spec.description
