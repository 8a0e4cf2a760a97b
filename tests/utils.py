import io
import json
from unittest import mock

import aiohttp
from tornado import testing
from botocore.exceptions import ClientError

from zipper.server.app import make_app
from zipper.core.context import ZipperContext


class MockCoroutine(mock.Mock):

    async def __call__(self, *args, **kwargs):
        return super().__call__(*args, **kwargs)

    def assert_awaited_once(self):
        assert self.call_count == 1


def client_error(code, status, operation='GetObject', message='Something happened'):
    return ClientError({
        'Error': {'Code': code, 'Message': message},
        'ResponseMetadata': {'HTTPStatusCode': status},
    }, operation)


class MockBody:
    """Stands in for an aiobotocore ``StreamingBody``.  ``fail_after`` makes every read past
    that many bytes raise like a dropped connection would."""

    def __init__(self, data, fail_after=None):
        self._data = io.BytesIO(data)
        self.fail_after = fail_after
        self.closed = False

    async def read(self, amt=None):
        if self.fail_after is not None and self._data.tell() >= self.fail_after:
            raise aiohttp.ClientPayloadError('Response payload is not completed')
        return self._data.read(-1 if amt is None else amt)

    def close(self):
        self.closed = True


class MockS3:
    """An in-memory bucket with the slice of the aiobotocore S3 client zipper uses."""

    def __init__(self, objects=None, errors=None):
        self.objects = objects or {}
        self.errors = errors or {}
        self.requested = []
        self.bodies = []
        self.head_bucket_error = None

    async def get_object(self, Bucket, Key):
        self.requested.append(Key)
        if Key in self.errors:
            raise self.errors[Key]
        if Key not in self.objects:
            raise client_error('NoSuchKey', 404, message='The specified key does not exist.')

        data = self.objects[Key]
        body = MockBody(data)
        self.bodies.append(body)
        return {'Body': body, 'ContentLength': len(data)}

    async def head_bucket(self, Bucket):
        if self.head_bucket_error is not None:
            raise self.head_bucket_error
        return {}


class MockRedis:
    """A dict behind the async ``get``/``ping`` calls of ``redis.asyncio.Redis``."""

    def __init__(self, data=None, error=None):
        self.data = data or {}
        self.error = error
        self.requested = []

    async def get(self, key):
        self.requested.append(key)
        if self.error is not None:
            raise self.error
        return self.data.get(key)

    async def ping(self):
        if self.error is not None:
            raise self.error
        return True

    def store_manifest(self, token, items):
        self.data['zip:' + token] = json.dumps(items).encode('utf-8')


class HandlerTestCase(testing.AsyncHTTPTestCase):

    def setUp(self):
        self.redis = MockRedis()
        self.s3 = MockS3()
        self.context = ZipperContext(self.redis, self.s3, 'test-bucket', chunk_size=1024)
        super().setUp()

    def get_app(self):
        return make_app(self.context, debug=False)
