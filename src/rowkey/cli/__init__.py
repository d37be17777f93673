"""
CLI layer for rowkey.

Encodes, decodes and inspects doc ids against a unique key declaration,
for debugging a connector's ids by hand. All key logic lives in
``rowkey.unique_key``; this package handles argument parsing and output.

Entry point::

    rowkey --help
"""

from rowkey.cli.app import app

__all__ = ["app"]
