"""Whitespace and comment minification for SVG markup."""

import re

_COMMENT = re.compile(r"<!--[\s\S]*?-->")
_BETWEEN_TAGS = re.compile(r">\s+<")
_WHITESPACE_RUN = re.compile(r"\s{2,}")
_NEWLINE = re.compile(r"[\r\n]")


def minify_svg(markup: str) -> str:
    """Strip comments and collapse whitespace in SVG markup."""
    text = _COMMENT.sub("", markup)
    text = _BETWEEN_TAGS.sub("><", text)
    text = _WHITESPACE_RUN.sub(" ", text)
    return _NEWLINE.sub("", text)
