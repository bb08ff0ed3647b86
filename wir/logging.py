#! /usr/bin/env python3

"""
Terminal logging for the scripts of the project.

Modules of the :py:mod:`wir` package only create their own loggers with
``logging.getLogger(__name__)``, handlers are attached to the root logger by
:py:func:`init`, which is called from :py:func:`wir.config.parse_args`.
"""

import logging

import colorlog

__all__ = ["setTerminalLogging", "set_argparser", "init"]

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# loggers of third-party libraries which are too chatty on the info level
QUIET_LOGGERS = ["httpx", "httpcore"]

_terminal_handler = None

def setTerminalLogging():
    """
    Attaches a coloured console handler to the root logger. Calling the
    function again replaces the handler instead of adding another one.
    """
    global _terminal_handler

    root = logging.getLogger()
    if _terminal_handler is not None:
        root.removeHandler(_terminal_handler)

    _terminal_handler = colorlog.StreamHandler()
    _terminal_handler.setFormatter(colorlog.ColoredFormatter(
        "{log_color}{levelname:8}{reset} {message_log_color}{message}",
        log_colors={
            "DEBUG":    "cyan",
            "INFO":     "green",
            "WARNING":  "yellow",
            "ERROR":    "bold_red",
            "CRITICAL": "bold_red",
        },
        secondary_log_colors={
            "message": {"ERROR": "bold_white", "CRITICAL": "bold_white"},
        },
        style="{",
    ))
    root.addHandler(_terminal_handler)
    return root

def set_argparser(argparser):
    """
    Adds the ``--log-level`` option and its ``-d``/``-q`` shortcuts.

    :param argparser: an instance of :py:class:`argparse.ArgumentParser`
    """
    argparser.add_argument("--log-level", choices=LOG_LEVELS.keys(), default="info",
            help="verbosity of the messages printed to the terminal (default: %(default)s)")
    argparser.add_argument("-d", "--debug", dest="log_level", action="store_const", const="debug",
            help="same as '--log-level debug'")
    argparser.add_argument("-q", "--quiet", dest="log_level", action="store_const", const="warning",
            help="same as '--log-level warning', only problems are printed")

def init(args):
    """
    Sets up terminal logging according to the parsed ``--log-level`` option.

    :param args: an instance of :py:class:`argparse.Namespace`
    """
    logging.getLogger().setLevel(LOG_LEVELS[args.log_level])

    # the request lines from httpx would duplicate our own progress messages
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    setTerminalLogging()
