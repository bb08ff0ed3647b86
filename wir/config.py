"""
Command line and config file handling.

Options of a script can be given on the command line or in an INI-style config
file. Config files live in ``$XDG_CONFIG_HOME/wiki-image-report/`` and are
selected by the ``-c``/``--config`` option, either by a base name
(``-c mdwiki`` reads ``mdwiki.conf`` from that directory) or by a path ending
with ``.conf``. Each script reads the section named after the script file,
falling back to the ``[DEFAULT]`` section:

.. code-block:: ini

    [DEFAULT]
    api-url = https://mdwiki.org/w/api.php

    [report-missing-images]
    input-file = worklist.txt
    connection-timeout = 30

Command line values override config file values, which override the
defaults of the arguments.
"""

import argparse
import configparser
import logging
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Self, TypeVar

import wir.logging

logger = logging.getLogger(__name__)

__all__ = [
    "ConfigurableObject",
    "read_config_section",
    "argtype_config",
    "argtype_dirname_must_exist",
    "argtype_positive_float",
    "getArgParser",
    "parse_args",
    "object_from_argparser",
]

PROJECT_NAME = "wiki-image-report"
CONFIG_DIR = os.path.join(
    os.getenv("XDG_CONFIG_HOME", os.path.expanduser("~/.config/")), PROJECT_NAME
)
DEFAULT_CONF = "default"


class ConfigurableObject(ABC):
    """
    Interface of classes whose instances are created from command line
    arguments by :py:func:`object_from_argparser`.
    """

    @classmethod
    @abstractmethod
    def set_argparser(cls, argparser: argparse.ArgumentParser) -> None:
        """Adds the arguments needed by :py:meth:`from_argparser`."""
        ...

    @classmethod
    @abstractmethod
    def from_argparser(cls, args: argparse.Namespace) -> Self:
        """Creates an instance from the parsed arguments."""
        ...


def read_config_section(path: str | Path, section: str | None = None) -> list[str]:
    """
    Converts one section of a config file into a list of long command line
    options.

    :param path: path to the config file
    :param str section:
        name of the section, by default the base name of the running script.
        Only the ``[DEFAULT]`` section is used when the file has no such
        section.
    :returns: a list like ``["--input-file", "worklist.txt"]``
    """
    parser = configparser.ConfigParser(interpolation=None)
    with open(path, encoding="utf-8") as f:
        parser.read_file(f)

    if section is None:
        section = Path(sys.argv[0]).stem
    if not parser.has_section(section):
        section = configparser.DEFAULTSECT

    options = []
    for key, value in parser.items(section):
        # single-letter keys would become "--d" instead of "-d"
        if len(key) == 1:
            raise argparse.ArgumentTypeError(
                f"short options are not allowed in a config file: '{key}'"
            )
        options += ["--" + key, value.strip()]
    return options


def argtype_config(string: str | Path) -> str | None:
    """
    Resolves the value of the ``--config`` option to the path of an existing
    config file. The default config file is optional, ``None`` is returned
    when it does not exist.
    """
    string = str(string)
    if os.path.dirname(string) or string.endswith(".conf"):
        if not string.endswith(".conf"):
            raise argparse.ArgumentTypeError(
                f"config filename must end with '.conf' suffix: '{string}'"
            )
        path = os.path.abspath(os.path.expanduser(string))
    else:
        path = os.path.join(CONFIG_DIR, string + ".conf")

    if os.path.exists(path):
        return path
    if os.path.islink(path):
        raise argparse.ArgumentTypeError(f"symbolic link is broken: '{path}'")
    if string == DEFAULT_CONF:
        return None
    raise argparse.ArgumentTypeError(f"file does not exist: '{path}'")


# path of a file created later, only its directory must exist
def argtype_dirname_must_exist(string: str | Path) -> str:
    path = os.path.abspath(os.path.expanduser(string))
    dirname = os.path.dirname(path)
    if not os.path.isdir(dirname):
        raise argparse.ArgumentTypeError(f"directory '{dirname}' does not exist")
    return path


# timeouts and similar quantities
def argtype_positive_float(string: str) -> float:
    try:
        value = float(string)
    except ValueError:
        raise argparse.ArgumentTypeError(f"value '{string}' is not a number")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"value '{string}' must be positive")
    return value


def _add_config_arguments(argparser: argparse.ArgumentParser) -> None:
    group = argparser.add_mutually_exclusive_group()
    group.add_argument(
        "-c",
        "--config",
        type=argtype_config,
        metavar="PATH_OR_NAME",
        default=DEFAULT_CONF,
        help=f"path to a .conf file, or the name of a file {CONFIG_DIR}/<name>.conf (default: %(default)s)",
    )
    group.add_argument(
        "--no-config",
        dest="config",
        action="store_const",
        const=None,
        help="ignore all config files",
    )


def getArgParser(**kwargs: Any) -> argparse.ArgumentParser:
    """
    Creates an :py:class:`argparse.ArgumentParser` with the arguments shared by
    all scripts, i.e. the config file selection and the logging options.

    :param kwargs: passed to :py:class:`argparse.ArgumentParser`
    """
    kwargs.setdefault("usage", "%(prog)s [options]")
    kwargs.setdefault("formatter_class", argparse.RawDescriptionHelpFormatter)
    kwargs.setdefault("allow_abbrev", False)
    kwargs["description"] = (
        kwargs.get("description", "")
        + "\n\nLong options (e.g. --log-level) can also be set in a config file"
        " selected with -c. Command line values take precedence over the config file."
    )

    argparser = argparse.ArgumentParser(**kwargs)
    _add_config_arguments(argparser)
    wir.logging.set_argparser(argparser)
    return argparser


def parse_args(
    argparser: argparse.ArgumentParser,
    section: str | None = None,
    cli_args: list[str] | None = None,
) -> argparse.Namespace:
    """
    Parses the command line arguments together with the options from the
    config file and sets up logging.

    :param argparser: a parser created by :py:func:`getArgParser`
    :param str section: config file section, see :py:func:`read_config_section`
    :param cli_args: the arguments to parse, ``sys.argv[1:]`` by default
    """
    if cli_args is None:
        cli_args = sys.argv[1:]

    # the config file must be known before the other arguments are parsed
    config_ap = argparse.ArgumentParser(add_help=False)
    _add_config_arguments(config_ap)
    args, _ = config_ap.parse_known_args(cli_args)

    config_args = []
    if args.config is not None:
        config_args = read_config_section(args.config, section)

    # config options go first so that the command line overrides them
    args, remainder = argparser.parse_known_args(config_args + cli_args, namespace=args)
    unknown = [arg for arg in remainder if arg.startswith("-") and arg in cli_args]
    if unknown:
        argparser.error("unrecognized arguments: " + " ".join(unknown))

    wir.logging.init(args)
    logger.debug(f"Parsed arguments:\n{args}")
    return args


T = TypeVar("T", bound=ConfigurableObject)


def object_from_argparser(
    cls: type[T], section: str | None = None, **kwargs: Any
) -> T:
    """
    Creates an instance of ``cls`` from the command line arguments and the
    config file.

    :param cls: a :py:class:`ConfigurableObject` subclass
    :param str section: passed to :py:func:`parse_args`
    :param kwargs: passed to :py:func:`getArgParser`
    """
    argparser = getArgParser(**kwargs)
    cls.set_argparser(argparser)
    return cls.from_argparser(parse_args(argparser, section))
