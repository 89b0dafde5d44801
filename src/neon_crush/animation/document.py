"""Shared helpers for walking SVG document trees."""

import xml.etree.ElementTree as ET
from typing import Iterator

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
XLINK_HREF = f"{{{XLINK_NAMESPACE}}}href"

TIMING_ELEMENTS = frozenset({"animate", "animateTransform", "animateMotion", "set"})

ET.register_namespace("", SVG_NAMESPACE)
ET.register_namespace("xlink", XLINK_NAMESPACE)


def local_name(tag: object) -> str:
    """Strip the ``{namespace}`` prefix from an element tag."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def parse_svg(markup: str | bytes) -> ET.Element:
    """
    Parse SVG markup into an element tree.

    Raises:
        ET.ParseError: If the markup is not well-formed XML
        ValueError: If the root element is not ``<svg>``
    """
    root = ET.fromstring(markup)
    if local_name(root.tag) != "svg":
        raise ValueError(f"Expected <svg> root element, got <{local_name(root.tag)}>")
    return root


def iter_timing_elements(root: ET.Element) -> Iterator[ET.Element]:
    """Yield every SMIL timing element in document order."""
    for element in root.iter():
        if local_name(element.tag) in TIMING_ELEMENTS:
            yield element


def iter_style_sources(root: ET.Element) -> Iterator[str]:
    """Yield the text of ``<style>`` blocks, then every inline ``style`` attribute."""
    for element in root.iter():
        if local_name(element.tag) == "style":
            yield "".join(element.itertext())
    for element in root.iter():
        style = element.get("style")
        if style:
            yield style
