import asyncio

import aiohttp
from botocore.exceptions import BotoCoreError, ClientError

from zipper.core import streams
from zipper.core import exceptions


# S3 error codes meaning the key doesn't exist.  ``NoSuchKey`` comes from GetObject, the bare
# ``404``/``NotFound`` forms from requests that have no body to carry an error code.
NOT_FOUND_CODES = ('NoSuchKey', 'NotFound', '404')


class ObjectFetcher:
    """Opens objects in the backing bucket for reading.

    :param s3: an aiobotocore S3 client, shared by every request
    :param str bucket: name of the bucket holding the objects
    """

    def __init__(self, s3, bucket):
        self.s3 = s3
        self.bucket = bucket

    async def open(self, storage_path):
        """Start reading the object at ``storage_path``.  The caller owns the returned stream and
        must ``close()`` it, whether or not it was read to the end.

        Expired or rejected credentials surface as ``ClientError`` and are reported as
        :class:`~zipper.core.exceptions.FetchFailed` like any other failure.

        :param str storage_path: key of the object in the bucket
        :rtype: :class:`zipper.core.streams.ObjectStreamReader`
        :raises: :class:`zipper.core.exceptions.NotFound`
        :raises: :class:`zipper.core.exceptions.FetchFailed`
        """
        if not storage_path:
            raise exceptions.FetchFailed(storage_path, log_message='Empty storage path')

        try:
            response = await self.s3.get_object(Bucket=self.bucket, Key=storage_path)
        except ClientError as exc:
            error = exc.response.get('Error', {})
            status = exc.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
            if error.get('Code') in NOT_FOUND_CODES or status == 404:
                raise exceptions.NotFound(
                    storage_path, log_message='File not found. {}'.format(storage_path)
                )
            raise exceptions.FetchFailed(storage_path, log_message='{} {}: {}'.format(
                status, error.get('Code'), error.get('Message')
            ))
        except (BotoCoreError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise exceptions.FetchFailed(storage_path, log_message=repr(exc))

        return streams.ObjectStreamReader(
            storage_path,
            response['Body'],
            size=response.get('ContentLength'),
        )
