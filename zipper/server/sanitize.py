import re

from zipper.core.logging import TOKEN_PATTERN, DEFAULT_MASK


class EventSanitizer:
    """Masks download tokens in what is sent to Sentry.  Tokens are bearer credentials and reach
    events through the request's query string, tornado's access log breadcrumbs and POSTed form
    data.  Values stored under a key in ``KEYS`` are replaced outright; any other string has its
    ``token=`` values masked.
    """

    KEYS = frozenset(['token', 'password', 'secret_key', 'session_token'])

    def __init__(self, pattern=TOKEN_PATTERN, mask=DEFAULT_MASK):
        self.pattern = re.compile(pattern)
        self.mask = mask

    def sanitize(self, key, value):
        if isinstance(value, dict):
            return {item: self.sanitize(item, value[item]) for item in value}

        if isinstance(value, list):
            return [self.sanitize(key, item) for item in value]

        if isinstance(value, str):
            if isinstance(key, str) and key.lower() in self.KEYS:
                return self.mask
            return self.pattern.sub(self.mask, value)

        return value

    def before_send(self, event, hint):
        return self.sanitize(None, event)

    def before_breadcrumb(self, crumb, hint):
        return self.sanitize(None, crumb)
