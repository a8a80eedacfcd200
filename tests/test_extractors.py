import pytest
import yaml

from quire.extractors import extract_frontmatter


def test_extract_frontmatter_splits_body():
    data, body = extract_frontmatter("---\nlayout: custom\ntitle: About\n---\n<h1>Hi</h1>")
    assert data == {"layout": "custom", "title": "About"}
    assert body == "<h1>Hi</h1>"


def test_extract_frontmatter_without_block():
    data, body = extract_frontmatter("<h1>Hi</h1>")
    assert data == {}
    assert body == "<h1>Hi</h1>"


def test_extract_frontmatter_empty_block():
    data, body = extract_frontmatter("---\n---\nbody")
    assert data == {}
    assert body == "body"


def test_extract_frontmatter_non_mapping_is_ignored():
    data, body = extract_frontmatter("---\n- a\n- b\n---\nbody")
    assert data == {}
    assert body == "body"


def test_extract_frontmatter_invalid_yaml_raises():
    with pytest.raises(yaml.YAMLError):
        extract_frontmatter("---\ntitle: [unclosed\n---\nbody")
