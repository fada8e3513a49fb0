import copy
import logging
import sys


class Bcolors:
    RESET_ALL = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'


class ChangelogFormatter(logging.Formatter):
    level_colors = {
        logging.DEBUG: Bcolors.BLUE,
        logging.INFO: Bcolors.GREEN,
        logging.WARNING: Bcolors.YELLOW,
        logging.ERROR: Bcolors.RED,
        logging.CRITICAL: Bcolors.RED,
    }

    def __init__(self, fmt: str, colours: bool | None=None):
        super().__init__(fmt=fmt)
        # log-records are written to stderr, so changelog written to stdout may be piped
        self.colours = sys.stderr.isatty() if colours is None else colours

    def formatMessage(self, record):
        record = copy.copy(record)
        levelprefix = record.levelname
        if self.colours and (colour := self.level_colors.get(record.levelno)):
            levelprefix = f'{Bcolors.BOLD}{colour}{levelprefix}{Bcolors.RESET_ALL}'
        record.__dict__['levelprefix'] = levelprefix
        return super().formatMessage(record)


def default_fmt_string():
    return '%(asctime)s [%(levelprefix)s] %(name)s: %(message)s'


def configure_default_logging(
    stdout_level=None,
    force=True,
    custom_format_string: str='',
):
    if not stdout_level:
        stdout_level = logging.INFO

    # make sure to have a clean root logger (in case setup is called multiple times)
    if force:
        for h in list(logging.root.handlers):
            logging.root.removeHandler(h)
            h.close()

    sh = logging.StreamHandler(stream=sys.stderr)
    sh.setLevel(stdout_level)
    sh.setFormatter(ChangelogFormatter(fmt=custom_format_string or default_fmt_string()))

    logging.root.addHandler(hdlr=sh)
    logging.root.setLevel(level=stdout_level)

    # too verbose ...
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
