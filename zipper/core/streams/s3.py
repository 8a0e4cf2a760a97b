import asyncio
import logging

import aiohttp
from botocore.exceptions import BotoCoreError

from zipper.core.streams.base import BaseStream

logger = logging.getLogger(__name__)


class ObjectStreamReader(BaseStream):
    """Reads the body of an S3 ``GetObject`` response.

    A read that fails part way through an object can't be undone once the entry's header has been
    sent, so the failure is logged and treated as the end of the object.  The entry's CRC and sizes
    are computed over what was actually read, which keeps the archive itself valid.

    :param str storage_path: key of the object, for logging
    :param body: the ``StreamingBody`` from the ``GetObject`` response
    :param int size: ``ContentLength`` of the response, if known
    """

    def __init__(self, storage_path, body, size=None):
        super().__init__()
        self.storage_path = storage_path
        self.body = body
        self._size = size
        self.closed = False

    @property
    def size(self):
        return self._size

    @property
    def name(self):
        return self.storage_path

    def close(self):
        if self.closed:
            return
        self.closed = True
        self.body.close()

    async def _read(self, size=-1):
        if self.at_eof():
            return b''

        try:
            chunk = await self.body.read(None if size < 0 else size)
        except (aiohttp.ClientError, asyncio.TimeoutError, BotoCoreError) as exc:
            logger.error('Reading "{}" failed after it was opened, the archive entry is '
                         'truncated: {!r}'.format(self.storage_path, exc))
            chunk = b''

        if not chunk:
            self.feed_eof()
            self.close()

        return chunk
