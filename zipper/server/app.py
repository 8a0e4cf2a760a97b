import signal
import asyncio
import logging

import tornado.web

import sentry_sdk
from sentry_sdk.integrations.tornado import TornadoIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from zipper import settings
from zipper.server import handlers
from zipper.server import sanitize
from zipper.core import exceptions
from zipper.version import __version__
from zipper.core.context import ZipperContext
from zipper.server import settings as server_settings

logger = logging.getLogger(__name__)


def make_app(context, debug=False):
    """Build the tornado application.  Every path is served by the zip handler.

    :param context: the :class:`zipper.core.context.ZipperContext` shared by all requests
    """

    sanitizer = sanitize.EventSanitizer()
    sentry_logging = LoggingIntegration(
        level=logging.INFO,  # Capture INFO level and above as breadcrumbs
        event_level=None,   # Do not send logs of any level as events
    )
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        release=__version__,
        integrations=[TornadoIntegration(), sentry_logging, ],
        before_send=sanitizer.before_send,
        before_breadcrumb=sanitizer.before_breadcrumb,
    )

    app = tornado.web.Application(
        [(r'/.*', handlers.ZipHandler, {'context': context})],
        debug=debug,
        autoreload=False,
    )
    return app


async def run():
    try:
        context = await ZipperContext.create()
    except exceptions.StartupError as exc:
        logger.critical('{} {}'.format(exc.message, exc.log_message or ''))
        raise SystemExit(1)

    app = make_app(context, server_settings.DEBUG)
    server = app.listen(
        server_settings.PORT,
        address=server_settings.ADDRESS,
        xheaders=server_settings.XHEADERS,
    )

    logger.info("Listening on {0}:{1}".format(server_settings.ADDRESS, server_settings.PORT))

    stopping = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stopping.set)

    await stopping.wait()

    logger.info('Shutting down')
    server.stop()
    await server.close_all_connections()
    await context.close()


def serve():
    asyncio.run(run(), debug=server_settings.DEBUG)
