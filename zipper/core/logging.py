import re

import colorlog


# The value of a ``token`` query argument, up to the next argument or whitespace
TOKEN_PATTERN = r'(?<=token=)(.*?)(?=&|\s|$)'
DEFAULT_MASK = '***'


class MaskFormatter(colorlog.ColoredFormatter):
    """A colored formatter that masks secrets in the rendered log line.  Download tokens travel in
    the query string, so any line that echoes a request target (tornado's access log, the
    per-request summary line) would otherwise leak a usable bearer token into the logs.

    :param str pattern: a regex matching the secret portion of the message
    :param str mask: replacement for every match
    """

    def __init__(self, fmt=None, datefmt=None, style='%', pattern=None, mask=DEFAULT_MASK,
                 **kwargs):
        super().__init__(fmt=fmt, datefmt=datefmt, style=style, **kwargs)
        self.pattern = re.compile(pattern) if pattern else None
        self.mask = mask

    def format(self, record):
        message = super().format(record)
        if self.pattern is None:
            return message
        return self.pattern.sub(self.mask, message)
