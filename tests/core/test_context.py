import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from botocore.exceptions import EndpointConnectionError

from zipper.core import exceptions
from zipper.core.context import ZipperContext
from zipper.core.manifest import ManifestResolver
from zipper.core.archive import ArchiveStreamer

from tests.utils import client_error


class TestZipperContext:

    def test_builds_collaborators(self, mock_redis, mock_s3):
        context = ZipperContext(mock_redis, mock_s3, 'test-bucket', key_prefix='dl:', chunk_size=10)

        assert isinstance(context.resolver, ManifestResolver)
        assert isinstance(context.streamer, ArchiveStreamer)
        assert context.resolver.key_for('tok') == 'dl:tok'
        assert context.streamer.chunk_size == 10

    @pytest.mark.asyncio
    async def test_check(self, mock_redis, mock_s3):
        context = ZipperContext(mock_redis, mock_s3, 'test-bucket')

        await context.check()

    @pytest.mark.asyncio
    async def test_check_redis_down(self, mock_redis, mock_s3):
        mock_redis.error = RedisConnectionError('Connection refused')
        context = ZipperContext(mock_redis, mock_s3, 'test-bucket')

        with pytest.raises(exceptions.StartupError) as exc:
            await context.check()

        assert exc.value.message == 'Lookup store is unreachable'
        assert 'ConnectionError: Connection refused' in exc.value.log_message

    @pytest.mark.asyncio
    async def test_check_no_bucket(self, mock_redis, mock_s3):
        context = ZipperContext(mock_redis, mock_s3, '')

        with pytest.raises(exceptions.StartupError):
            await context.check()

    @pytest.mark.asyncio
    @pytest.mark.parametrize('error', [
        client_error('403', 403, operation='HeadBucket'),
        EndpointConnectionError(endpoint_url='http://localhost:9000'),
    ])
    async def test_check_bucket_unreachable(self, mock_redis, mock_s3, error):
        mock_s3.head_bucket_error = error
        context = ZipperContext(mock_redis, mock_s3, 'test-bucket')

        with pytest.raises(exceptions.StartupError) as exc:
            await context.check()

        assert exc.value.message == 'Bucket "test-bucket" is unreachable'
        assert exc.value.log_message == '{}: {}'.format(type(error).__name__, error)

    @pytest.mark.asyncio
    async def test_close_without_create(self, mock_redis, mock_s3):
        context = ZipperContext(mock_redis, mock_s3, 'test-bucket')

        await context.close()
        await context.close()
