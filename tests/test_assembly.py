from pathlib import Path
from types import MappingProxyType

from quire.assembly import ERROR_KEY, PageDataAssembler
from quire.content import Page
from quire.data import SiteSnapshot
from quire.errors import PageRenderError
from quire.locales import LocaleTable
from quire.protocols import I18N, LAYOUTS

from .fakes import FakeEngine


def make_options(tmp_path, **extra):
    return {"input": tmp_path, "builtins": True, "default_layout": "default", **extra}


def make_page(tmp_path, rel, front_matter=None, attributes=None, locale=None):
    rel = Path(rel)
    return Page(
        path=tmp_path / "pages" / rel,
        rel=rel,
        source="",
        front_matter=front_matter or {},
        attributes=attributes or {},
        locale=locale,
    )


def make_snapshot(data=None, locales=None):
    return SiteSnapshot(
        version=1,
        data=MappingProxyType(data or {}),
        locales=locales or LocaleTable(),
        collections=MappingProxyType({}),
    )


def test_front_matter_beats_global_data(tmp_path):
    assembler = PageDataAssembler(FakeEngine({LAYOUTS}), make_options(tmp_path))
    page = make_page(tmp_path, "index.html", {"title": "Page"})
    data = assembler.page_data(page, make_snapshot({"title": "Global", "other": 1}))
    assert data["title"] == "Page"
    assert data["other"] == 1


def test_front_matter_deep_merges_global_data(tmp_path):
    assembler = PageDataAssembler(FakeEngine({LAYOUTS}), make_options(tmp_path))
    page = make_page(tmp_path, "index.html", {"site": {"author": "Y"}})
    global_data = {"site": {"title": "X"}}
    data = assembler.page_data(page, make_snapshot(global_data))
    assert data["site"] == {"title": "X", "author": "Y"}
    assert global_data == {"site": {"title": "X"}}


def test_attributes_override_global_data_but_not_front_matter(tmp_path):
    assembler = PageDataAssembler(FakeEngine(), make_options(tmp_path))
    page = make_page(
        tmp_path,
        "index.html",
        front_matter={"b": "front"},
        attributes={"a": "attr", "b": "attr"},
    )
    data = assembler.page_data(page, make_snapshot({"a": "global", "b": "global"}))
    assert data["a"] == "attr"
    assert data["b"] == "front"


def test_constants_override_front_matter(tmp_path):
    assembler = PageDataAssembler(FakeEngine({LAYOUTS}), make_options(tmp_path))
    page = make_page(tmp_path, "blog/post.html", {"page": "fake", "root": "/", "locale": "xx"})
    data = assembler.page_data(page, make_snapshot())
    assert data["page"] == "post"
    assert data["root"] == "../"
    assert data["locale"] is None
    assert data["layout"] == "default"
    assert ERROR_KEY not in data


def test_layout_absent_without_layout_support(tmp_path):
    assembler = PageDataAssembler(FakeEngine(), make_options(tmp_path))
    page = make_page(tmp_path, "index.html", {"layout": "custom"})
    data = assembler.page_data(page, make_snapshot())
    # The front matter value survives; no layout constant is added on top
    assert data["layout"] == "custom"
    assert "layout" not in assembler.constants(page)


def test_helpers_are_applied_last(tmp_path):
    assembler = PageDataAssembler(FakeEngine(), make_options(tmp_path))
    page = make_page(tmp_path, "index.html", {"current_page": "shadowed", "slug": "x"})
    data = assembler.page_data(page, make_snapshot({"markdown": "global"}))
    assert callable(data["current_page"])
    assert callable(data["slug"])
    assert callable(data["markdown"])
    assert data["current_page"]("index")


def test_error_marker_attached(tmp_path):
    assembler = PageDataAssembler(FakeEngine(), make_options(tmp_path))
    page = make_page(tmp_path, "index.html")
    error = PageRenderError(page.path, "boom")
    data = assembler.page_data(page, make_snapshot(), error=error)
    assert data[ERROR_KEY] is error
    assert data["_page_error"] is error


def test_translate_helper_uses_page_locale(tmp_path):
    locales = LocaleTable(MappingProxyType({"en": {"hello": "Hello"}}))
    assembler = PageDataAssembler(FakeEngine({I18N}), make_options(tmp_path))
    page = make_page(tmp_path, "en/index.html", locale="en")
    data = assembler.page_data(page, make_snapshot(locales=locales))
    assert data["locale"] == "en"
    assert data["translate"]("hello") == "Hello"
    assert data["translate"]("missing") == "missing"


def test_assemble_order_is_explicit(tmp_path):
    page = make_page(tmp_path, "index.html", attributes={"k": "attr"})
    data = PageDataAssembler.assemble(
        page,
        {"k": "global", "g": 1},
        {"k": "front", "nested": {"a": 1}},
        {"k": "constant"},
        {"k": "helper"},
    )
    assert data == {"k": "helper", "g": 1, "nested": {"a": 1}}
