"""
Parsing Layer - sample parser

Extracts expected-output assertions from scanned code samples.
"""

from example_checker.parsing.assertions import (
    parse,
    split_comment,
    decode_output,
    read_delimited,
    OUTPUT_MARKER,
    NO_OUTPUT_SENTINEL,
    SEPARATOR_TOKENS,
)

__all__ = [
    "parse",
    "split_comment",
    "decode_output",
    "read_delimited",
    "OUTPUT_MARKER",
    "NO_OUTPUT_SENTINEL",
    "SEPARATOR_TOKENS",
]
