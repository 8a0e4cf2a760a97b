import logging
import typing

import tornado.web
import sentry_sdk

from zipper.core import utils
from zipper.core import exceptions
from zipper.server import utils as server_utils

logger = logging.getLogger(__name__)


class DownloadRequest(typing.NamedTuple):
    """What a request asked for: the raw token and the archive name to offer the client."""
    token: str
    requested_name: typing.Optional[str]
    filename: str

    @classmethod
    def from_arguments(cls, arguments):
        """Validate the query arguments of a download.

        :param dict arguments: tornado's ``request.query_arguments``
        :raises: :class:`zipper.core.exceptions.InvalidParameters` if there is no query string or
            no non-empty ``token``
        """
        if not arguments:
            raise exceptions.InvalidParameters('No query parameters')

        token = server_utils.first_value(arguments, 'token')
        if not token:
            raise exceptions.InvalidParameters('Missing or empty token')

        requested_name = server_utils.first_value(arguments, 'as')
        return cls(token, requested_name, utils.archive_name(requested_name))


class BaseHandler(tornado.web.RequestHandler):
    """Base Handler for zipper views.  Translates :class:`zipper.core.exceptions.ZipperError`s
    raised before the response is committed into their status codes.  Error responses never have
    a body; the cause is only written to the logs.
    """

    def initialize(self, context):
        self.context = context

    def write_error(self, status_code, exc_info=None, **kwargs):
        if exc_info is not None and issubclass(exc_info[0], exceptions.ZipperError):
            self.set_status(int(exc_info[1].code))
        elif exc_info is not None:
            sentry_sdk.capture_exception(exc_info)

        self.clear_header('Content-Type')
        self.finish()

    def log_exception(self, typ, value, tb):
        if isinstance(value, exceptions.InvalidParameters):
            logger.debug('Rejected {}: {}'.format(self.request.uri, value.message))
        elif isinstance(value, exceptions.ResolutionError):
            logger.warning('{}: {}'.format(typ.__name__, value.log_message))
        else:
            super().log_exception(typ, value, tb)


class ZipHandler(BaseHandler):
    """Serve a token's files as a single streamed zip archive."""

    async def get(self):
        download = DownloadRequest.from_arguments(self.request.query_arguments)

        # Nothing is written until a manifest is in hand; after the first chunk goes out the
        # status is 200 whatever happens to the entries.
        manifest = await self.context.resolver.resolve(download.token)

        self.set_header('Content-Type', 'application/zip')
        self.set_header('Content-Disposition', utils.make_disposition(download.filename))

        await self.context.streamer.stream(manifest, server_utils.ResponseSink(self))

        logger.info('{}\t{}\t{:.3f}s'.format(
            self.request.method,
            self.request.uri,
            self.request.request_time(),
        ))

    # Only the query string matters; a POST body is ignored
    post = get
