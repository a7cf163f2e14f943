"""Tests for the legacy vendor dialect and its spellings."""

import pytest

from imgparams.parsers import LegacyVendorParser
from imgparams.schemas import ImageRequest, OverlayFragment, Source

pytestmark = pytest.mark.unit

RESIZE_SPELLINGS = [
    "/cat.jpg?im.resize=width:800,height:600,mode:fit",
    "/cat.jpg?im=Resize,width=800,height=600,mode=fit",
    "/im-resize=width:800,height:600,mode:fit/cat.jpg",
    "/im(resize=width:800,height:600,mode:fit)/cat.jpg",
]


class TestMatches:
    """Test cheap presence detection."""

    @pytest.mark.parametrize("url", RESIZE_SPELLINGS + ["/a.jpg?imwidth=800", "/a.jpg?IMPOLICY=letterbox"])
    def test_vendor_requests_match(self, legacy, url):
        assert legacy.matches(ImageRequest.from_url(url))

    @pytest.mark.parametrize("url", ["/a.jpg?width=800", "/image/a.jpg?image=1", "/imgs/a.jpg"])
    def test_other_requests_do_not_match(self, legacy, url):
        assert not legacy.matches(ImageRequest.from_url(url))


class TestSpellings:
    """Every spelling reduces to the same instances."""

    @pytest.mark.parametrize("url", RESIZE_SPELLINGS)
    def test_resize_spellings_are_equivalent(self, legacy, parse, url):
        assert parse(legacy, url) == [("width", 800), ("height", 600), ("fit", "contain")]

    def test_split_query_pair(self, legacy):
        assert legacy.split_query_pair("im", "Resize,width=800,height=600") == (
            "Resize", "width=800,height=600"
        )
        assert legacy.split_query_pair("im", "Quality=80") == ("Quality", "80")
        assert legacy.split_query_pair("im.quality", "80") == ("quality", "80")
        assert legacy.split_query_pair("width", "80") is None

    def test_group_with_several_directives(self, legacy, parse):
        assert parse(legacy, "/im(resize=width:800,quality=high,format=webp)/cat.jpg") == [
            ("width", 800),
            ("quality", 90),
            ("format", "webp"),
        ]

    def test_instances_carry_legacy_priority(self, legacy, context):
        instances = legacy.parse(ImageRequest.from_url(RESIZE_SPELLINGS[0]), context)
        assert {i.source for i in instances} == {Source.LEGACY}
        assert {i.priority for i in instances} == {55}

    def test_custom_prefix(self, make_config, parse):
        parser = LegacyVendorParser(make_config(VENDOR_PREFIX="ak"))
        assert parse(parser, "/cat.jpg?ak.quality=80&im.quality=10&akwidth=300") == [
            ("quality", 80),
            ("imwidth", 300),
        ]


class TestVendorQueryKeys:
    """Direct vendor query keys."""

    def test_dimensions_use_vendor_names(self, legacy, parse):
        assert parse(legacy, "/a.jpg?imwidth=800&imheight=0&imheight=450.4") == [
            ("imwidth", 800),
            ("imheight", 450),
        ]

    def test_policy_density_color(self, legacy, parse):
        assert parse(legacy, "/a.jpg?impolicy=letterbox&imdensity=2&imcolor=F00") == [
            ("fit", "pad"),
            ("dpr", 2),
            ("background", "#ff0000"),
        ]

    def test_bypass_is_noop(self, legacy, parse):
        assert parse(legacy, "/a.jpg?imbypass=true") == []


class TestAdvancedGating:
    """Advanced directives are no-ops unless enabled."""

    def test_blur_skipped_and_recorded(self, legacy, parse):
        diagnostics = {}
        assert parse(legacy, "/a.jpg?im.blur=20&im.quality=80", diagnostics=diagnostics) == [
            ("quality", 80)
        ]
        assert diagnostics["skipped"] == ["blur"]

    def test_blur_applied_when_enabled(self, legacy, parse, advanced):
        assert parse(legacy, "/a.jpg?im.blur=20", advanced) == [("blur", 50)]

    def test_composites_travel_in_one_instance(self, legacy, parse, advanced):
        parsed = parse(
            legacy,
            "/a.jpg?im=Composite,url=https://x/a.png,placement=north"
            "&im.quality=70&im=Watermark,url=https://x/b.png",
            advanced,
        )
        assert [name for name, _ in parsed] == ["overlays", "quality"]
        fragments = parsed[0][1]
        assert all(isinstance(fragment, OverlayFragment) for fragment in fragments)
        assert [(f.occurrence, f.url) for f in fragments] == [
            (0, "https://x/a.png"),
            (1, "https://x/b.png"),
        ]


class TestParseClause:
    """Then-clause entry point used by condition directives."""

    def test_dot_clause(self, legacy, context):
        instances = legacy.parse_clause("im.resize=width:400", context)
        assert [(i.name, i.value) for i in instances] == [("width", 400)]

    def test_equals_clause(self, legacy, context):
        instances = legacy.parse_clause("im=Quality,quality=low", context)
        assert [(i.name, i.value) for i in instances] == [("quality", 50)]

    def test_is_vendor_clause(self, legacy):
        assert legacy.is_vendor_clause("IM.resize=width:1")
        assert legacy.is_vendor_clause("im=Resize,width=1")
        assert not legacy.is_vendor_clause("width=400")
