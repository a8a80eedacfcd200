import asyncio

import pytest

from quire.errors import SetupError
from quire.locales import LocaleTable, load_locales, translate


def create_locales(tmp_path):
    locales = tmp_path / "locales"
    (locales / "de").mkdir(parents=True)
    (locales / "en.yaml").write_text(
        "hello: Hello\nnav:\n  home: Home\n", encoding="utf-8"
    )
    (locales / "de" / "common.yaml").write_text("hello: Hallo\n", encoding="utf-8")
    (locales / ".hidden.yaml").write_text("x: y\n", encoding="utf-8")
    return locales


def test_load_locales_reads_files_and_folders(tmp_path):
    table = asyncio.run(load_locales(create_locales(tmp_path)))
    assert sorted(table.locales) == ["de", "en"]
    assert table.strings["en"]["hello"] == "Hello"
    assert table.strings["de"]["common"]["hello"] == "Hallo"


def test_translate_returns_mapped_string(tmp_path):
    table = asyncio.run(load_locales(create_locales(tmp_path)))
    assert translate(table, "en", "hello") == "Hello"
    assert translate(table, "en", "nav.home") == "Home"
    assert translate(table, "de", "common.hello") == "Hallo"
    assert table.translate("en", "hello") == "Hello"


def test_translate_falls_back_to_key(tmp_path):
    table = asyncio.run(load_locales(create_locales(tmp_path)))
    assert translate(table, "en", "missing") == "missing"
    assert translate(table, "fr", "hello") == "hello"
    assert translate(table, None, "hello") == "hello"
    # Non-scalar values are not strings to show
    assert translate(table, "en", "nav") == "nav"


def test_missing_locales_folder_gives_identity(tmp_path):
    table = asyncio.run(load_locales(tmp_path / "locales"))
    assert not table
    assert table.locales == []
    assert translate(table, "en", "anything") == "anything"
    assert translate(LocaleTable(), "en", "x") == "x"


def test_invalid_locale_file_fails_setup(tmp_path):
    locales = tmp_path / "locales"
    locales.mkdir()
    (locales / "en.yaml").write_text("hello: [unclosed\n", encoding="utf-8")
    with pytest.raises(SetupError):
        asyncio.run(load_locales(locales))
