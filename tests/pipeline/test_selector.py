"""Tests for parser selection."""

import pytest

from imgparams.parsers import Dialect
from imgparams.pipeline import ParserSelector
from imgparams.schemas import ImageRequest

pytestmark = pytest.mark.unit


@pytest.fixture
def selector(internal_config):
    return ParserSelector(internal_config)


def _selected(selector, url):
    return [parser.dialect for parser in selector.select(ImageRequest.from_url(url))]


def test_standard_always_selected(selector):
    assert _selected(selector, "/a.jpg") == [Dialect.STANDARD]


def test_compact_selected_by_short_key(selector):
    assert _selected(selector, "/a.jpg?w=800") == [Dialect.STANDARD, Dialect.COMPACT]


def test_mixed_dialects_in_evaluation_order(selector):
    assert _selected(selector, "/thumbnail/a.jpg?im.quality=80&q=70") == [
        Dialect.STANDARD,
        Dialect.COMPACT,
        Dialect.PATH,
        Dialect.LEGACY,
    ]


def test_vendor_path_segment_selects_legacy_only(selector):
    assert _selected(selector, "/im-resize=width:800/a.jpg") == [Dialect.STANDARD, Dialect.LEGACY]


def test_get_returns_shared_instance(selector):
    assert selector.get(Dialect.PATH) is selector.get(Dialect.PATH)
    assert selector.get(Dialect.LEGACY).base_priority == 55
