"""Dialect parsers.

Each parser turns one URL dialect into a flat list of ``ParameterInstance``
records. ``PARSERS`` maps every ``Dialect`` member to its parser class, in
evaluation order.
"""

from types import MappingProxyType

from imgparams.parsers.base import Dialect, DialectParser
from imgparams.parsers.standard import StandardParser
from imgparams.parsers.compact import CompactParser, COMPACT_KEYS
from imgparams.parsers.path import PathParser
from imgparams.parsers.legacy import LegacyVendorParser
from imgparams.parsers.directives import DirectiveDecoder, parse_clauses

PARSERS = MappingProxyType({
    Dialect.STANDARD: StandardParser,
    Dialect.COMPACT: CompactParser,
    Dialect.PATH: PathParser,
    Dialect.LEGACY: LegacyVendorParser,
})

__all__ = [
    'Dialect',
    'DialectParser',
    'StandardParser',
    'CompactParser',
    'PathParser',
    'LegacyVendorParser',
    'DirectiveDecoder',
    'PARSERS',
    'COMPACT_KEYS',
    'parse_clauses',
]
