"""Fixtures for dialect parser tests."""

import pytest

from imgparams.parsers import (
    CompactParser,
    DirectiveDecoder,
    LegacyVendorParser,
    PathParser,
    StandardParser,
)
from imgparams.schemas import ImageRequest, ProcessingContext


@pytest.fixture
def standard(internal_config):
    return StandardParser(internal_config)


@pytest.fixture
def compact(internal_config):
    return CompactParser(internal_config)


@pytest.fixture
def path_parser(internal_config):
    return PathParser(internal_config)


@pytest.fixture
def legacy(internal_config):
    return LegacyVendorParser(internal_config)


@pytest.fixture
def decoder(internal_config):
    """Decoder with advanced features enabled."""
    return DirectiveDecoder(internal_config.legacy, advanced_features=True)


@pytest.fixture
def parse(context):
    """Run a parser over a URL and return ``{name: value}`` in parse order."""
    def _parse(parser, url, parse_context=None, diagnostics=None):
        request = ImageRequest.from_url(url)
        instances = parser.parse(request, parse_context or context, diagnostics)
        return [(instance.name, instance.value) for instance in instances]

    return _parse


@pytest.fixture
def advanced():
    return ProcessingContext(advanced_features=True)
