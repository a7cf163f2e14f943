"""`imgparams` - multi-dialect image transformation parameter resolution.

Subpackages:
- schemas: Configuration layers and request-scoped records
- parameters: Parameter registry, size codes, value coercion
- parsers: Standard, compact, path and legacy vendor dialects
- pipeline: Selector, processor, conditions, overlays, formatter
- contracts: Stage invariants
- cli: Command-line resolver
"""

__version__ = "0.1.0"
