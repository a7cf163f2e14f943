"""End-to-end resolution through ParameterHandler."""

import pytest

from imgparams.pipeline import ParameterHandler, to_query_string
from imgparams.schemas import ImageRequest, ProcessingContext, ResolutionResult

pytestmark = pytest.mark.integration

EXPECTED_RESIZE = {"width": 800, "height": 600, "fit": "contain"}


class TestCrossDialectEquivalence:
    """Equivalent spellings produce byte-identical options."""

    @pytest.mark.parametrize(
        "url",
        [
            "/cat.jpg?im.resize=width:800,height:600,mode:fit",
            "/cat.jpg?im=Resize,width=800,height=600,mode=fit",
            "/im-resize=width:800,height:600,mode:fit/cat.jpg",
            "/im(resize=width:800,height:600,mode:fit)/cat.jpg",
            "/cat.jpg?width=800&height=600&fit=contain",
            "/cat.jpg?w=800&h=600&fit=contain",
            "/_width=800/_h=600/_fit=contain/cat.jpg",
        ],
    )
    def test_resize(self, resolve, url):
        options = resolve(url)
        assert options == EXPECTED_RESIZE
        assert list(options) == list(EXPECTED_RESIZE)

    @pytest.mark.parametrize(
        "url",
        ["/cat.jpg?im.quality=high", "/cat.jpg?im=Quality,quality=high", "/cat.jpg?q=90", "/cat.jpg?imquality=90"],
    )
    def test_quality(self, resolve, url):
        assert resolve(url) == {"quality": 90}


class TestPriority:
    """Conflicts across dialects are settled by priority."""

    def test_path_beats_legacy_beats_standard(self, resolve):
        assert resolve("/_width=300/a.jpg?width=800&im.resize=width:500") == {"width": 300}
        assert resolve("/a.jpg?width=800&im.resize=width:500") == {"width": 500}

    def test_standard_beats_compact_on_tie(self, resolve):
        assert resolve("/a.jpg?w=400&width=800") == {"width": 800}


class TestSizeCodes:
    """Size codes never override an explicit width."""

    def test_size_code_alone(self, resolve):
        assert resolve("/a.jpg?f=s") == {"width": 600}

    def test_explicit_width_wins(self, resolve):
        assert resolve("/a.jpg?f=s&width=400") == {"width": 400}

    def test_path_width_wins(self, handler):
        result = handler.resolve("/_width=300/a.jpg?f=xl")
        assert result.options == {"width": 300}
        assert result.diagnostics["size_code"] is None

    def test_standard_spelling_ignored(self, resolve):
        assert resolve("/a.jpg?size_code=s") == {}

    def test_path_size_code(self, resolve):
        assert resolve("/_f=s/a.jpg") == {"width": 600}


class TestAspect:
    """An aspect ratio turns on context-aware cropping unless ctx is given."""

    @pytest.mark.parametrize("url", ["/a.jpg?r=16-9", "/a.jpg?aspect=16:9", "/_r=16-9/a.jpg"])
    def test_ctx_defaults_on(self, resolve, url):
        assert resolve(url) == {"aspect": "16:9", "ctx": True}

    @pytest.mark.parametrize("url", ["/a.jpg?r=16-9&s=0", "/a.jpg?aspect=16:9&ctx=false"])
    def test_explicit_ctx_kept(self, resolve, url):
        assert resolve(url) == {"aspect": "16:9", "ctx": False}

    def test_invalid_aspect_adds_nothing(self, resolve):
        assert resolve("/a.jpg?r=wide") == {}


class TestDeliveryOptions:
    """Delivery flags pass through the standard dialect."""

    def test_valid_values(self, resolve):
        options = resolve("/a.jpg?strip=true&allowExpansion=1&compression=fast&onerror=redirect")
        assert options == {"strip": True, "allowExpansion": True, "compression": "fast", "onerror": "redirect"}

    def test_invalid_flags_default_false(self, resolve):
        assert resolve("/a.jpg?strip=maybe&allowExpansion=sure") == {"strip": False, "allowExpansion": False}

    def test_invalid_enums_dropped(self, resolve):
        assert resolve("/a.jpg?compression=slow&onerror=ignore") == {}


class TestRequestParsing:
    """Unusual URL shapes resolve without raising."""

    def test_bracket_in_leading_segment(self, resolve):
        assert resolve("//[cdn/cat.jpg?width=10") == {"width": 10}

    def test_leading_double_slash_keeps_path_option(self, resolve):
        assert resolve("//_width=300/cat.jpg") == {"width": 300}

    @pytest.mark.parametrize("raw, expected", [("800.7", 801), ("800.2", 800), ("0.4", 1)])
    def test_fractional_width_rounded(self, resolve, raw, expected):
        assert resolve(f"/a.jpg?width={raw}") == {"width": expected}


class TestAdvancedTranslations:
    """Blur, rotation, mirroring and overlays."""

    @pytest.mark.parametrize("amount, expected", [("20", {"blur": 50}), ("200", {"blur": 250}), ("x", {})])
    def test_blur(self, resolve, amount, expected):
        assert resolve(f"/a.jpg?im.blur={amount}", advanced_features=True) == expected

    def test_blur_ignored_without_advanced_features(self, handler):
        result = handler.resolve("/a.jpg?im.blur=20")
        assert result.options == {}
        assert result.diagnostics["skipped"] == ["blur"]

    @pytest.mark.parametrize(
        "degrees, expected",
        [("45", {}), ("46", {"rotate": 90}), ("180", {"rotate": 180}), ("316", {})],
    )
    def test_rotation(self, resolve, degrees, expected):
        assert resolve(f"/a.jpg?im.rotate={degrees}") == expected

    def test_mirror(self, resolve):
        assert resolve("/a.jpg?im.mirror=both", advanced_features=True) == {"flip": True, "flop": True}

    def test_overlay_placement(self, resolve):
        options = resolve(
            "/a.jpg?im=Composite,url=https://x/logo.png,placement=southeast",
            advanced_features=True,
        )
        assert options == {"overlays": [{"url": "https://x/logo.png", "bottom": 5, "right": 5}]}

    def test_overlay_offset_and_center(self, resolve):
        options = resolve(
            "/a.jpg?im=Composite,url=a,placement=north,offset=20&im=Composite,url=b,placement=center",
            advanced_features=True,
        )
        assert options == {"overlays": [{"url": "a", "top": 20}, {"url": "b"}]}


class TestConditions:
    """Condition directives evaluated against dimensions."""

    URL = "/a.jpg?width=900&im=IfDimension,width>1000,im.resize=width:400"

    def test_matches(self, handler):
        result = handler.resolve(self.URL, ProcessingContext(advanced_features=True, dimensions=(1200, 800)))
        assert result.options == {"width": 400}
        assert result.diagnostics["conditions"][0]["matched"] is True

    def test_noop(self, handler):
        result = handler.resolve(self.URL, ProcessingContext(advanced_features=True, dimensions=(800, 600)))
        assert result.options == {"width": 900}
        assert result.diagnostics["conditions"][0]["matched"] is False

    def test_lookup_failure_is_noop(self, handler):
        def lookup():
            raise TimeoutError("slow origin")

        result = handler.resolve(self.URL, ProcessingContext(advanced_features=True, dimension_lookup=lookup))
        assert result.options == {"width": 900}


class TestIdempotence:
    """Re-resolving formatted output as standard parameters is a fixed point."""

    @pytest.mark.parametrize(
        "url",
        [
            "/cat.jpg?im.resize=width:800,height:600,mode:fit&im.quality=low",
            "/cat.jpg?im=AspectCrop,width=16,height=9,xPosition=0.2,yPosition=0.8&im.rotate=100",
            "/cat.jpg?im.grayscale&im.backgroundcolor=FFF&im.metadata=all&im.frame=0",
            "/cat.jpg?im.crop=rect:(10,20,100,50)&im.contrast=1.5&im.sharpen=50",
            "/cat.jpg?im.blur=4&im.mirror=h&im=Composite,url=https://x/l.png,placement=southwest,opacity=40",
            "/thumbnail/cat.jpg?f=m&imdensity=2&impolicy=letterbox",
        ],
    )
    def test_fixed_point(self, resolve, url):
        options = resolve(url, advanced_features=True)
        assert options
        assert resolve("/cat.jpg?" + to_query_string(options), advanced_features=True) == options


class TestDiagnostics:
    """Diagnostic metadata alongside the options."""

    def test_fields(self, handler):
        result = handler.resolve("/thumbnail/_q=70/photos/cat.jpg?f=s&unknown=1")
        assert isinstance(result, ResolutionResult)
        assert result.options == {"width": 600, "quality": 70}
        diagnostics = result.diagnostics
        assert diagnostics["dialects"] == ["standard", "compact", "path"]
        assert diagnostics["derivative"] == "thumbnail"
        assert diagnostics["size_code"] == "s"
        assert diagnostics["image_path"] == "/photos/cat.jpg"
        assert diagnostics["translated"] == result.options
        assert {"name": "size_code", "value": "s", "source": "compact"} in diagnostics["raw"]

    def test_accepts_prepared_request(self, handler):
        result = handler.resolve(ImageRequest.from_url("/a.jpg?w=10"))
        assert result.options == {"width": 10}


def test_default_context_follows_config(make_config):
    handler = ParameterHandler(make_config(ADVANCED_FEATURES=True))
    assert handler.resolve("/a.jpg?im.blur=2").options == {"blur": 5}


def test_malformed_input_never_raises(resolve):
    # Only the defaulted quality survives
    assert resolve("/a.jpg?width=&im=&im.resize=(&_=1&f=&q=high&overlays={") == {"quality": 85}
