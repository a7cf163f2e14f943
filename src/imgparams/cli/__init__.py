"""Command-line interface modules for imgparams.

This package contains the core CLI logic, making scripts/ optional and deletable.
"""

from imgparams.cli.resolve_url import resolve_url, main

__all__ = ['resolve_url', 'main']
