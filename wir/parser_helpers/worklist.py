#! /usr/bin/env python3

"""
Parser for the work list of articles to be checked.

The work list is a plain text file in wiki syntax: section headers
(``== Name ==`` or ``=== Name ===``) group the wikilinks (``[[Title]]``)
which follow them. Links which are not article titles are excluded, see
:py:func:`is_excluded`.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["Section", "parse_sections", "read_sections", "is_excluded"]

logger = logging.getLogger(__name__)

# marker link starting a block of links that should not be checked
EXCLUDED_BLOCK_MARKER = "WikiProjectMed"
EXCLUDED_PREFIXES = ("WikiProjectMed:", "Image:")

HEADER_RE = re.compile(r"(={2,3})\s*([^=]+?)\s*\1")
WIKILINK_RE = re.compile(r"\[\[([^\]]+)\]\]")
# e.g. interlanguage links like [[en]]
TWO_CHARS_RE = re.compile(r"\w{2}", flags=re.ASCII)


@dataclass(frozen=True)
class Section:
    # name of the section, None for links before the first header
    name: str | None
    # titles in the order of appearance, duplicates are kept
    articles: tuple[str, ...] = field(default_factory=tuple)


def is_excluded(title: str) -> bool:
    """
    Checks if the (stripped) target of a wikilink should be excluded from the
    work list.

    :param str title: the target of the wikilink
    :returns: ``True`` if the link is not an article to be checked
    """
    return (
        title.startswith(EXCLUDED_PREFIXES)
        or TWO_CHARS_RE.fullmatch(title) is not None
        or "[" in title
    )


def parse_sections(text: str) -> list[Section]:
    """
    Parses the work list into sections of article titles.

    Sections without any article are dropped. All links following the
    ``[[WikiProjectMed]]`` marker are ignored until the next section header.

    :param str text: the content of the work list
    :returns: a list of :py:class:`Section` objects in document order
    """
    sections: list[Section] = []
    name: str | None = None
    articles: list[str] = []
    in_excluded_block = False

    for line in text.split("\n"):
        line = line.strip()

        match = HEADER_RE.fullmatch(line)
        if match:
            if articles:
                sections.append(Section(name, tuple(articles)))
            name = match.group(2).strip()
            articles = []
            in_excluded_block = False
            continue

        for link in WIKILINK_RE.finditer(line):
            title = link.group(1).strip()
            if title == EXCLUDED_BLOCK_MARKER:
                in_excluded_block = True
                continue
            if in_excluded_block:
                continue
            if is_excluded(title):
                logger.debug("skipping link [[{}]]".format(title))
                continue
            articles.append(title)

    if articles:
        sections.append(Section(name, tuple(articles)))

    return sections


def read_sections(path: str | Path) -> list[Section]:
    """
    Reads and parses the work list from a file.

    :param path: path to the work list
    :returns: a list of :py:class:`Section` objects
    :raises FileNotFoundError: when the file does not exist
    """
    with open(path, encoding="utf-8") as f:
        text = f.read()
    sections = parse_sections(text)
    logger.info("Loaded {} articles in {} sections from {}".format(
        sum(len(s.articles) for s in sections), len(sections), path))
    return sections
