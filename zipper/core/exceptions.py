from http import HTTPStatus


class ZipperError(Exception):
    """The base exception that all others are subclasses of. Provides ``__str__`` and ``__repr__``.

    ``code`` is the HTTP status the error maps to when it escapes a request handler before the
    response headers are committed.  ``log_message`` carries detail meant for the server logs
    only; it is never written to the client.
    """

    def __init__(self, message, code=HTTPStatus.INTERNAL_SERVER_ERROR, log_message=None,
                 is_user_error=False):
        super().__init__(code)
        self.code = code
        self.message = message
        self.log_message = log_message
        self.is_user_error = is_user_error

    def __repr__(self):
        return '<{}({}, {})>'.format(self.__class__.__name__, self.code, self.message)

    def __str__(self):
        return '{}, {}'.format(self.code, self.message)


class InvalidParameters(ZipperError):
    """Errors regarding incorrect data being sent with a request.  Defaults status code to 400,
    Bad Request.
    """
    def __init__(self, message, code=HTTPStatus.BAD_REQUEST):
        super().__init__(message, code=code, is_user_error=True)


class ResolutionError(ZipperError):
    """A download token could not be turned into a manifest.  Every subclass is reported to the
    client as the same 401, ``Unauthorized``, so a caller can't tell a revoked token from a sick
    lookup store.  The subclass and ``log_message`` say which it was.
    """
    def __init__(self, token, log_message=None):
        super().__init__('Unauthorized', code=HTTPStatus.UNAUTHORIZED, log_message=log_message,
                         is_user_error=True)
        self.token = token


class StoreUnavailable(ResolutionError):
    """The lookup store could not be reached or failed while handling the read."""
    pass


class TokenNotFound(ResolutionError):
    """The lookup store has no manifest for the token."""
    pass


class MalformedManifest(ResolutionError):
    """The stored value exists but doesn't decode into a list of file descriptors."""
    pass


class FetchError(ZipperError):
    """An object could not be opened from the backing store.  Never fatal for an archive; the
    entry is skipped and streaming continues with the next descriptor.
    """
    def __init__(self, storage_path, log_message=None, code=HTTPStatus.SERVICE_UNAVAILABLE):
        super().__init__('Unable to fetch "{}"'.format(storage_path), code=code,
                         log_message=log_message)
        self.storage_path = storage_path


class NotFound(FetchError):
    """The backing store reports the object does not exist."""
    def __init__(self, storage_path, log_message=None):
        super().__init__(storage_path, log_message=log_message, code=HTTPStatus.NOT_FOUND)


class FetchFailed(FetchError):
    """Any other failure opening an object: network, permissions, bad key, expired credentials."""
    pass


class SinkClosedError(ZipperError):
    """The response sink stopped accepting writes, usually because the client went away.  Once
    raised nothing else can be sent for the request.
    """
    def __init__(self, message='Client closed the connection'):
        super().__init__(message, code=HTTPStatus.INTERNAL_SERVER_ERROR)


class StartupError(ZipperError):
    """A backing store couldn't be reached or rejected our credentials while the server was
    starting.  Fatal; the process stops before it begins serving.
    """
    def __init__(self, message, log_message=None):
        super().__init__(message, code=HTTPStatus.SERVICE_UNAVAILABLE, log_message=log_message)
