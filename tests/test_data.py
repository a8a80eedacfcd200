import asyncio

import pytest

from quire.config import load_config
from quire.data import build_snapshot, load_collections, load_global_data
from quire.errors import SetupError

from .fakes import FakeEngine


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_load_global_data_keys_by_stem(tmp_path):
    data_dir = tmp_path / "data"
    write(data_dir / "site.yaml", "title: X\n")
    write(data_dir / "nav.json", '[{"label": "Home"}]')
    write(data_dir / "notes.txt", "ignored")
    data = asyncio.run(load_global_data(data_dir))
    assert data == {"site": {"title": "X"}, "nav": [{"label": "Home"}]}


def test_load_global_data_later_path_wins(tmp_path):
    data_dir = tmp_path / "data"
    write(data_dir / "a" / "site.yaml", "title: nested\n")
    write(data_dir / "site.json", '{"title": "top"}')
    data = asyncio.run(load_global_data(data_dir))
    # data/a/site.yaml sorts before data/site.json
    assert data["site"] == {"title": "top"}


def test_load_global_data_missing_folder(tmp_path):
    assert asyncio.run(load_global_data(tmp_path / "data")) == {}


def test_load_global_data_malformed_file(tmp_path):
    write(tmp_path / "data" / "broken.json", "{not json")
    with pytest.raises(SetupError) as excinfo:
        asyncio.run(load_global_data(tmp_path / "data"))
    assert excinfo.value.source_path == tmp_path / "data" / "broken.json"


def test_load_collections_skips_invalid_folders(tmp_path):
    root = tmp_path / "collections"
    write(root / "posts" / "config.yaml", "entries:\n  - slug: one\n  - slug: two\n")
    write(root / "posts" / "template.html", "<h1>{{ slug }}</h1>")
    write(root / "team" / "config.json", '{"entries": [{"slug": "ann"}], "layout": "team"}')
    write(root / "team" / "template.html", "{{ slug }}")
    # No config file
    write(root / "drafts" / "template.html", "x")
    # Unparseable config
    write(root / "broken" / "config.yaml", "entries: [unclosed\n")
    write(root / "broken" / "template.html", "x")
    # Config that is not a mapping
    write(root / "listy" / "config.yaml", "- a\n")
    write(root / "listy" / "template.html", "x")

    collections = asyncio.run(load_collections(root))
    assert list(collections) == ["posts", "team"]
    posts = collections["posts"]
    assert [e["slug"] for e in posts.entries] == ["one", "two"]
    assert posts.template == "<h1>{{ slug }}</h1>"
    assert collections["team"].metadata == {"layout": "team"}


def test_collection_template_first_sorted_match_wins(tmp_path):
    root = tmp_path / "collections"
    write(root / "posts" / "config.yaml", "entries: []\n")
    write(root / "posts" / "template.md", "markdown")
    write(root / "posts" / "template.html", "html")
    collections = asyncio.run(load_collections(root))
    assert collections["posts"].template == "html"
    assert collections["posts"].template_path.name == "template.html"


def test_collection_without_template_fails(tmp_path):
    root = tmp_path / "collections"
    write(root / "posts" / "config.yaml", "entries: []\n")
    with pytest.raises(SetupError):
        asyncio.run(load_collections(root))


def test_collection_entries_from_global_data(tmp_path):
    root = tmp_path / "collections"
    write(root / "people" / "config.yaml", "data: team\nslug: handle\noutput: about/team\n")
    write(root / "people" / "template.html", "{{ name }}")
    data = {"team": [{"handle": "ann", "name": "Ann"}, "not-a-mapping"]}
    people = asyncio.run(load_collections(root, data))["people"]
    assert people.entries == [{"handle": "ann", "name": "Ann"}]
    assert people.slug_key == "handle"
    assert people.output == "about/team"


def test_build_snapshot_loads_everything(tmp_path):
    write(tmp_path / "data" / "site.yaml", "title: X\n")
    write(tmp_path / "locales" / "en.yaml", "hello: Hello\n")
    write(tmp_path / "collections" / "posts" / "config.yaml", "entries: []\n")
    write(tmp_path / "collections" / "posts" / "template.html", "t")
    engine = FakeEngine()
    snapshot = asyncio.run(build_snapshot(load_config(tmp_path), engine, 3))
    assert snapshot.version == 3
    assert dict(snapshot.data) == {"site": {"title": "X"}}
    assert snapshot.locales.locales == ["en"]
    assert list(snapshot.collections) == ["posts"]
    assert engine.setup_calls == 1
    assert list(engine.built_collections) == ["posts"]
    with pytest.raises(TypeError):
        snapshot.data["new"] = 1


def test_build_snapshot_wraps_failures(tmp_path):
    write(tmp_path / "data" / "site.yaml", "title: [unclosed\n")
    with pytest.raises(SetupError):
        asyncio.run(build_snapshot(load_config(tmp_path), FakeEngine(), 1))
