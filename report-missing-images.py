#! /usr/bin/env python3

import logging
import os.path
import sys

from wir.report import ReportRunner

logger = logging.getLogger(__name__)

def main(runner):
    if not os.path.isfile(runner.input_file):
        logger.warning('Input file "{}" not found.'.format(runner.input_file))
        runner.connection.close()
        sys.exit(1)
    runner.run()

if __name__ == "__main__":
    import wir.config
    runner = wir.config.object_from_argparser(ReportRunner, description="Report articles without an infobox image or a file link")
    main(runner)
