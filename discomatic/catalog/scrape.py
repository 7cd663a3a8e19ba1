"""
Turn a catalog disc page into a field mapping.

The catalog publishes no API for disc details, so the HTML is matched with a
fixed set of regular expressions.  Every value is HTML-unescaped; fields that
are absent from the page are absent from the returned mapping.
"""

from __future__ import annotations

import html
import re
from datetime import datetime
from typing import Any, Dict, List

import structlog

from discomatic.models import DiscCategory, Language, Region

log = structlog.get_logger()

TITLE_RE = re.compile(r"<h1>(.*?)</h1>")
FOREIGN_TITLE_RE = re.compile(r"<h2>(.*?)</h2>")
DISC_PART_RE = re.compile(r"\((.*?)\)")
CATEGORY_RE = re.compile(r"<tr><th>Category</th><td>(.*?)</td></tr>")
REGION_RE = re.compile(r'<tr><th>Region</th><td><a href="/discs/region/(.*?)/">')
LANGUAGES_RE = re.compile(r'<img src="/images/languages/(.*?)\.png" alt=".*?" title=".*?" />')
SERIAL_RE = re.compile(r"<tr><th>Serial</th><td>(.*?)</td></tr>")
ERROR_COUNT_RE = re.compile(r"<tr><th>Errors count</th><td>(.*?)</td></tr>")
VERSION_RE = re.compile(r"<tr><th>Version</th><td>(.*?)</td></tr>")
EDITION_RE = re.compile(r"<tr><th>Edition</th><td>(.*?)</td></tr>")
DUMPERS_RE = re.compile(r'<a href="/discs/dumper/(.*?)/">')
COMMENTS_RE = re.compile(r"<tr><th>Comments</th></tr><tr><td>(.*?)</td></tr>", re.DOTALL)
CONTENTS_RE = re.compile(r"<tr><th>Contents</th></tr><tr .*?><td>(.*?)</td></tr>", re.DOTALL)
ADDED_RE = re.compile(r"<tr><th>Added</th><td>(.*?)</td></tr>")
LAST_MODIFIED_RE = re.compile(r"<tr><th>Last modified</th><td>(.*?)</td></tr>")

_DATE_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d")


def _text(value: str) -> str:
    return html.unescape(value).strip()


def _multiline(value: str) -> str:
    value = value.replace("<br />", "\n").replace("<b>ISBN</b>", "[T:ISBN]")
    return _text(value)


def _date(value: str):
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(_text(value), fmt)
        except ValueError:
            continue
    log.debug("catalog.bad_date", value=value)
    return None


def parse_disc_page(page: str) -> Dict[str, Any]:
    """Return the catalog fields found on a disc detail *page*.

    Keys mirror the :class:`~discomatic.record.CommonDiscInfo` attribute names
    plus ``version``, ``edition``, ``dumpers``, ``added`` and
    ``last_modified``.
    """
    fields: Dict[str, Any] = {}

    match = TITLE_RE.search(page)
    if match:
        title = _text(match.group(1))
        if " (" in title:
            head, tail = title.split(" (", 1)
            for part in DISC_PART_RE.findall("(" + tail):
                part = part.strip()
                if part.startswith("Disc"):
                    fields["disc_number"] = part[len("Disc"):].strip()
                else:
                    fields["disc_title"] = part
            title = head
        fields["title"] = title

    match = FOREIGN_TITLE_RE.search(page)
    if match:
        fields["foreign_title"] = _text(match.group(1))

    match = CATEGORY_RE.search(page)
    fields["category"] = (
        DiscCategory.from_text(_text(match.group(1))) if match else None
    ) or DiscCategory.GAMES

    match = REGION_RE.search(page)
    if match:
        region = Region.from_text(_text(match.group(1)))
        if region is not None:
            fields["region"] = region

    languages: List[Language] = []
    for code in LANGUAGES_RE.findall(page):
        language = Language.from_text(_text(code))
        if language is not None and language not in languages:
            languages.append(language)
    if languages:
        fields["languages"] = languages

    for key, pattern in (
        ("serial", SERIAL_RE),
        ("errors_count", ERROR_COUNT_RE),
        ("version", VERSION_RE),
        ("edition", EDITION_RE),
    ):
        match = pattern.search(page)
        if match:
            fields[key] = _text(match.group(1))

    dumpers = [_text(d) for d in DUMPERS_RE.findall(page)]
    if dumpers:
        fields["dumpers"] = dumpers

    match = COMMENTS_RE.search(page)
    if match:
        fields["comments"] = _multiline(match.group(1))
    match = CONTENTS_RE.search(page)
    if match:
        fields["contents"] = _multiline(match.group(1))

    for key, pattern in (("added", ADDED_RE), ("last_modified", LAST_MODIFIED_RE)):
        match = pattern.search(page)
        if match:
            value = _date(match.group(1))
            if value is not None:
                fields[key] = value
    return fields
