import json
import hashlib
import logging
import typing

from redis.exceptions import RedisError

from zipper.core import settings
from zipper.core import exceptions

logger = logging.getLogger(__name__)


class FileDescriptor(typing.NamedTuple):
    """One file a manifest asks to put in the archive.

    ``storage_path`` is the object key in the backing store; an empty value marks the descriptor
    as unusable.  ``file_name`` and ``folder`` are untrusted display values and must go through
    :func:`zipper.core.utils.entry_path` before use.
    """
    storage_path: str
    file_name: str = ''
    folder: str = ''

    # stored field name -> attribute, matched case-insensitively
    FIELDS = {
        's3path': 'storage_path',
        'filename': 'file_name',
        'folder': 'folder',
    }

    @classmethod
    def from_json(cls, item):
        """Build a descriptor from one decoded manifest item.  Unknown keys are ignored, missing
        or null fields become the empty string.

        :raises: `ValueError` if ``item`` is not an object or a known field isn't a string
        """
        if not isinstance(item, dict):
            raise ValueError('Expected an object, got {}'.format(type(item).__name__))

        values = {}
        for key, value in item.items():
            attr = cls.FIELDS.get(key.lower())
            if attr is None:
                continue
            if value is None:
                value = ''
            if not isinstance(value, str):
                raise ValueError('Field {} must be a string, got {}'.format(
                    key, type(value).__name__))
            values[attr] = value

        return cls(
            storage_path=values.get('storage_path', ''),
            file_name=values.get('file_name', ''),
            folder=values.get('folder', ''),
        )


class Manifest:
    """The ordered list of descriptors a token resolves to.  Order is archive-entry order."""

    def __init__(self, token, descriptors):
        self.token = token
        self.descriptors = list(descriptors)

    def __iter__(self):
        return iter(self.descriptors)

    def __len__(self):
        return len(self.descriptors)

    def __repr__(self):
        return '<Manifest({} descriptors)>'.format(len(self.descriptors))


def obfuscate_token(token):
    """Tokens are bearer credentials; only ever log a digest of them."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()[:12].upper()


class ManifestResolver:
    """Turns a download token into a :class:`Manifest` with a single read from the lookup store.

    There is no retry and no caching here.  Retries belong to the connection pool, and every
    request re-reads its token so deleting the key revokes the download on the next request.

    :param redis: a ``redis.asyncio.Redis`` client, or anything with an async ``get(key)``
    :param str key_prefix: namespace separating manifest keys from other uses of the store
    """

    def __init__(self, redis, key_prefix=None):
        self.redis = redis
        self.key_prefix = settings.REDIS_KEY_PREFIX if key_prefix is None else key_prefix

    def key_for(self, token):
        return '{}{}'.format(self.key_prefix, token)

    async def resolve(self, token):
        """Fetch and decode the manifest stored for ``token``.

        :param str token: the raw token from the request
        :rtype: :class:`Manifest`
        :raises: :class:`zipper.core.exceptions.StoreUnavailable`
        :raises: :class:`zipper.core.exceptions.TokenNotFound`
        :raises: :class:`zipper.core.exceptions.MalformedManifest`
        """
        digest = obfuscate_token(token)

        try:
            payload = await self.redis.get(self.key_for(token))
        except RedisError as exc:
            raise exceptions.StoreUnavailable(
                token, log_message='Lookup store failed reading token {}: {}: {}'.format(
                    digest, type(exc).__name__, exc)
            )

        if not payload:
            raise exceptions.TokenNotFound(
                token, log_message='No manifest stored for token {}'.format(digest)
            )

        try:
            descriptors = self.decode(payload)
        except ValueError as exc:
            raise exceptions.MalformedManifest(
                token, log_message='Manifest for token {} is malformed: {}'.format(digest, exc)
            )

        logger.debug('Resolved token {} to {} descriptors'.format(digest, len(descriptors)))
        return Manifest(token, descriptors)

    @staticmethod
    def decode(payload):
        """Decode a stored manifest into a list of :class:`FileDescriptor`.

        :param payload: `bytes` or `str` holding a JSON list of objects
        :raises: `ValueError` (``UnicodeDecodeError`` and ``JSONDecodeError`` are both
            subclasses) when the payload isn't a list of descriptor objects
        """
        if isinstance(payload, bytes):
            payload = payload.decode('utf-8')

        items = json.loads(payload)
        # ``null`` is an unset list, which holds no files
        if items is None:
            return []
        if not isinstance(items, list):
            raise ValueError('Expected a list, got {}'.format(type(items).__name__))

        return [FileDescriptor.from_json(item) for item in items]
