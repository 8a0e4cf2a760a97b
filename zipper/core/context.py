import logging
import contextlib

from redis.asyncio import Redis
from redis.exceptions import RedisError
from aiobotocore.config import AioConfig
from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError

from zipper.core import settings
from zipper.core import exceptions
from zipper.core.storage import ObjectFetcher
from zipper.core.archive import ArchiveStreamer
from zipper.core.manifest import ManifestResolver

logger = logging.getLogger(__name__)


class ZipperContext:
    """The process-wide collaborators a request needs: the lookup store client and the object
    store client, plus the resolver and streamer built on top of them.  Created once at startup
    and handed to every request handler; nothing in it changes per request.

    Tests build one directly around fake clients.

    :param redis: a ``redis.asyncio.Redis`` client
    :param s3: an aiobotocore S3 client
    :param str bucket: bucket holding the archived objects
    """

    def __init__(self, redis, s3, bucket, key_prefix=None, chunk_size=None):
        self.redis = redis
        self.s3 = s3
        self.bucket = bucket
        self.resolver = ManifestResolver(redis, key_prefix=key_prefix)
        self.streamer = ArchiveStreamer(ObjectFetcher(s3, bucket), chunk_size=chunk_size)
        self._exit_stack = None

    @classmethod
    async def create(cls):
        """Open the Redis pool and the S3 client from settings and check both are usable.

        Redis connections authenticate with ``REDIS_CONFIG_PASSWORD`` when they are opened and are
        PINGed before reuse once idle for ``HEALTH_CHECK_INTERVAL`` seconds.

        :raises: :class:`zipper.core.exceptions.StartupError`
        """
        stack = contextlib.AsyncExitStack()

        redis_client = Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            health_check_interval=settings.REDIS_HEALTH_CHECK_INTERVAL,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
        stack.push_async_callback(redis_client.aclose)

        config = AioConfig(
            signature_version='s3v4',
            max_pool_connections=settings.S3_MAX_POOL_CONNECTIONS,
            connect_timeout=settings.S3_CONNECT_TIMEOUT,
            read_timeout=settings.S3_READ_TIMEOUT,
        )
        s3_client = await stack.enter_async_context(get_session().create_client(
            's3',
            region_name=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
            aws_session_token=settings.S3_SESSION_TOKEN,
            config=config,
        ))

        context = cls(redis_client, s3_client, settings.S3_BUCKET)
        context._exit_stack = stack

        try:
            await context.check()
        except exceptions.StartupError:
            await stack.aclose()
            raise

        return context

    async def check(self):
        """Make one round trip to each store so bad hosts or credentials stop the process
        before it accepts requests.

        :raises: :class:`zipper.core.exceptions.StartupError`
        """
        try:
            await self.redis.ping()
        except RedisError as exc:
            raise exceptions.StartupError(
                'Lookup store is unreachable',
                log_message='{}: {}'.format(type(exc).__name__, exc),
            )

        if not self.bucket:
            raise exceptions.StartupError('No bucket configured, set S3_CONFIG_BUCKET')

        try:
            await self.s3.head_bucket(Bucket=self.bucket)
        except (ClientError, BotoCoreError) as exc:
            raise exceptions.StartupError(
                'Bucket "{}" is unreachable'.format(self.bucket),
                log_message='{}: {}'.format(type(exc).__name__, exc),
            )

        logger.info('Connected to lookup store and bucket "{}"'.format(self.bucket))

    async def close(self):
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
            self._exit_stack = None
