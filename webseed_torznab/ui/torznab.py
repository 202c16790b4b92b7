# webseed_torznab/ui/torznab.py

"""Builders for the Torznab XML documents (caps, search feed, errors)."""

from __future__ import annotations

import re
from typing import Iterable

from lxml import etree

from ..config import TORRENT_MIME_TYPE, ServerConfig
from ..services.torrent_data import TorrentRecord
from ..utils import (
    CATEGORIES,
    build_download_url,
    build_magnet_link,
    format_rfc1123,
    torznab_category,
)

TORZNAB_NS = "http://torznab.com/schemas/2015/feed"
NSMAP = {"torznab": TORZNAB_NS}

# Characters XML 1.0 cannot carry, even escaped.
_XML_INVALID_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _xml_safe(text: str) -> str:
    return _XML_INVALID_CHARS.sub("", text)


def _sub(parent: etree._Element, tag: str, text: str, **attrib: str) -> etree._Element:
    element = etree.SubElement(parent, tag, **attrib)
    element.text = _xml_safe(text)
    return element


def _serialize(root: etree._Element) -> bytes:
    return etree.tostring(
        root, xml_declaration=True, encoding="UTF-8", pretty_print=True
    )


def render_caps(config: ServerConfig) -> bytes:
    """Returns the ``t=caps`` capabilities document."""
    caps = etree.Element("caps")
    etree.SubElement(
        caps,
        "server",
        version="1.0",
        title=config.title,
        strapline=config.description,
        email="admin@localhost",
        url=config.base_url,
        image="",
    )
    etree.SubElement(
        caps, "limits", max=str(config.max_results), default=str(config.max_results)
    )
    etree.SubElement(caps, "registration", available="no", open="no")

    searching = etree.SubElement(caps, "searching")
    for mode in ("search", "tv-search", "movie-search"):
        etree.SubElement(searching, mode, available="yes", supportedParams="q")

    categories = etree.SubElement(caps, "categories")
    for category_id, name in CATEGORIES.items():
        etree.SubElement(categories, "category", id=str(category_id), name=name)

    return _serialize(caps)


def build_item(record: TorrentRecord, base_url: str) -> etree._Element:
    """Builds one ``<item>`` element describing a torrent."""
    item = etree.Element("item")
    download_url = build_download_url(base_url, record)
    category = str(torznab_category(record.name))

    _sub(item, "title", record.name)
    _sub(item, "description", record.comment)
    _sub(item, "link", download_url)
    _sub(item, "guid", record.info_hash, isPermaLink="false")
    pub_date = format_rfc1123(record.creation_date)
    if pub_date:
        _sub(item, "pubDate", pub_date)
    _sub(item, "size", str(record.total_size))
    _sub(item, "category", category)
    etree.SubElement(
        item,
        "enclosure",
        url=download_url,
        length=str(record.total_size),
        type=TORRENT_MIME_TYPE,
    )

    attributes = [
        ("category", category),
        ("size", str(record.total_size)),
        ("seeders", "1"),
        ("peers", "1"),
        ("infohash", record.info_hash),
    ]
    magnet_link = build_magnet_link(record)
    if magnet_link:
        attributes.append(("magneturl", magnet_link))

    for name, value in attributes:
        etree.SubElement(
            item, f"{{{TORZNAB_NS}}}attr", name=name, value=_xml_safe(value)
        )
    return item


def render_search_feed(records: Iterable[TorrentRecord], config: ServerConfig) -> bytes:
    """Returns the RSS 2.0 feed with Torznab extensions for search results."""
    rss = etree.Element("rss", nsmap=NSMAP, version="2.0")
    channel = etree.SubElement(rss, "channel")
    _sub(channel, "title", config.title)
    _sub(channel, "description", config.description)
    _sub(channel, "link", config.base_url)

    for record in records:
        channel.append(build_item(record, config.base_url))

    return _serialize(rss)


def render_error(code: int, description: str) -> bytes:
    """Returns a Torznab ``<error>`` document."""
    error = etree.Element("error", code=str(code), description=_xml_safe(description))
    return _serialize(error)
