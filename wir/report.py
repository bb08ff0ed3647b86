"""
Report of articles without an image.

The articles of each section of the work list are checked one after another
and the titles without an image, or whose request timed out, are listed in a
plain text report in wiki syntax:

.. code-block:: text

    == Section name ==

    Articles without infobox image or File Commons:
    # [[Title]]

    Articles with Request timed out:
    # [[Other title]]
"""

import argparse
import logging
import os.path
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Self

from wir.client.connection import Connection
from wir.config import ConfigurableObject, argtype_dirname_must_exist
from wir.fetcher import Found, NotFound, TimedOut, fetch_wikitext
from wir.parser_helpers.images import has_image
from wir.parser_helpers.worklist import Section, read_sections

__all__ = [
    "SectionResult",
    "process_section",
    "format_section",
    "build_report",
    "get_output_filename",
    "write_report",
    "ReportRunner",
]

logger = logging.getLogger(__name__)

DEFAULT_INPUT_FILE = "input.txt"
DEFAULT_OUTPUT_FILE = "output.txt"

NO_IMAGE_HEADING = "Articles without infobox image or File Commons:"
TIMEOUT_HEADING = "Articles with Request timed out:"
# heading for links preceding the first section header of the work list
UNNAMED_SECTION = "(no section)"


@dataclass
class SectionResult:
    no_image: list[str] = field(default_factory=list)
    timed_out: list[str] = field(default_factory=list)


def process_section(connection: Connection, titles: Iterable[str]) -> SectionResult:
    """
    Checks the given articles one by one.

    Pages which could not be fetched are skipped and appear in neither list
    of the result.

    :param connection: a :py:class:`wir.client.connection.Connection` object
    :param titles: titles of the articles to check
    :returns: a :py:class:`SectionResult` object
    """
    result = SectionResult()
    for title in titles:
        logger.info("Checking: {}".format(title))
        fetched = fetch_wikitext(connection, title)
        match fetched:
            case TimedOut():
                result.timed_out.append(title)
            case NotFound():
                logger.warning("Could not fetch wikitext for {}".format(title))
            case Found(wikitext):
                if has_image(wikitext):
                    logger.info("  Image found")
                else:
                    logger.info("  No image found")
                    result.no_image.append(title)
    return result


def _format_list(titles: Iterable[str]) -> str:
    return "".join("# [[{}]]\n".format(title) for title in titles)


def format_section(name: str | None, result: SectionResult) -> str:
    """
    Formats the block of the report for one section. Headings of both lists
    are always present, even if the list is empty.
    """
    if name is None:
        name = UNNAMED_SECTION
    text = "\n== {} ==\n".format(name)
    text += "\n" + NO_IMAGE_HEADING + "\n"
    text += _format_list(result.no_image)
    text += "\n" + TIMEOUT_HEADING + "\n"
    text += _format_list(result.timed_out)
    return text


def build_report(connection: Connection, sections: Iterable[Section]) -> str:
    """
    Checks all articles of the given sections and assembles the report.

    :param connection: a :py:class:`wir.client.connection.Connection` object
    :param sections: :py:class:`wir.parser_helpers.worklist.Section` objects
    :returns: the text of the report, stripped of leading and trailing whitespace
    """
    report = ""
    for section in sections:
        if not section.articles:
            continue
        logger.info("Processing section {}".format(section.name or UNNAMED_SECTION))
        result = process_section(connection, section.articles)
        report += format_section(section.name, result)
    return report.strip()


def get_output_filename(base: str | Path) -> str:
    """
    Returns ``base`` if it does not exist, otherwise the first non-existing
    path with a numeric suffix inserted before the extension, e.g.
    ``output1.txt``, ``output2.txt``, etc.
    """
    base = str(base)
    if not os.path.exists(base):
        return base
    root, ext = os.path.splitext(base)
    i = 1
    while os.path.exists(f"{root}{i}{ext}"):
        i += 1
    return f"{root}{i}{ext}"


def write_report(text: str, base: str | Path) -> str:
    """
    Writes the report into a new file, existing files are never overwritten.

    :param str text: the text of the report
    :param base: the preferred path of the output file
    :returns: the path of the written file
    """
    filename = get_output_filename(base)
    with open(filename, "x", encoding="utf-8") as f:
        f.write(text)
    return filename


class ReportRunner(ConfigurableObject):
    """
    Checks the articles listed in the input file and writes the report.

    :param connection: a :py:class:`wir.client.connection.Connection` object
    :param input_file: path to the work list
    :param output_file: preferred path of the report
    """

    def __init__(
        self,
        connection: Connection,
        input_file: str | Path = DEFAULT_INPUT_FILE,
        output_file: str | Path = DEFAULT_OUTPUT_FILE,
    ):
        self.connection = connection
        self.input_file = input_file
        self.output_file = output_file

    @classmethod
    def set_argparser(cls, argparser: argparse.ArgumentParser) -> None:
        Connection.set_argparser(argparser)

        group = argparser.add_argument_group(title="Report parameters")
        group.add_argument(
            "--input-file",
            metavar="PATH",
            default=DEFAULT_INPUT_FILE,
            help="path to the list of articles to check (default: %(default)s)",
        )
        group.add_argument(
            "--output-file",
            metavar="PATH",
            type=argtype_dirname_must_exist,
            default=DEFAULT_OUTPUT_FILE,
            help="path to the report, a numeric suffix is added if the file exists (default: %(default)s)",
        )

    @classmethod
    def from_argparser(cls, args: argparse.Namespace) -> Self:
        connection = Connection.from_argparser(args)
        return cls(connection, args.input_file, args.output_file)

    def run(self) -> str:
        """
        :returns: the path of the written report
        :raises FileNotFoundError: when the input file does not exist
        """
        try:
            sections = read_sections(self.input_file)
            logger.info("Checking articles on {}".format(self.connection.get_hostname()))
            report = build_report(self.connection, sections)
        finally:
            self.connection.close()
        filename = write_report(report, self.output_file)
        logger.info("Results written to {}".format(filename))
        return filename
