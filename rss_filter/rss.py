"""RSS 2.0 document rendering."""

from __future__ import annotations

import re
from typing import Iterable
from xml.etree import ElementTree as ET

from .models import OutputItem

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Code points outside the XML 1.0 Char production.
_INVALID_XML_CHARS = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


class RenderError(RuntimeError):
    """Raised when the RSS document cannot be serialized."""


def _clean(value: str) -> str:
    return _INVALID_XML_CHARS.sub("\ufffd", value or "")


def _append_text(parent: ET.Element, tag: str, value: str) -> None:
    child = ET.SubElement(parent, tag)
    child.text = _clean(value)


def build_rss_document(
    title: str, description: str, link: str, items: Iterable[OutputItem]
) -> str:
    """Render the channel and its items as a pretty-printed RSS 2.0 document."""
    try:
        rss = ET.Element("rss", {"version": "2.0"})
        channel = ET.SubElement(rss, "channel")
        _append_text(channel, "title", title)
        _append_text(channel, "description", description)
        _append_text(channel, "link", link)

        for item in items:
            node = ET.SubElement(channel, "item")
            _append_text(node, "title", item.title)
            _append_text(node, "link", item.link)
            _append_text(node, "description", item.description)
            _append_text(node, "pubDate", item.pub_date)

        ET.indent(rss, space="  ")
        body = ET.tostring(rss, encoding="unicode", short_empty_elements=False)
    except (TypeError, ValueError) as exc:
        raise RenderError(f"Failed to encode RSS document: {exc}") from exc

    return XML_HEADER + body
