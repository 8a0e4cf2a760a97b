import logging
import collections

from zipper.core import utils
from zipper.core import streams
from zipper.core import exceptions
from zipper.server import settings as server_settings

logger = logging.getLogger(__name__)


class ArchiveStreamer:
    """Writes a manifest's files to a sink as one streaming zip archive.

    Entries are fetched and written one at a time in manifest order, so at most one object stream
    is open and memory is bounded by a single chunk, not by the archive.  A descriptor that can't
    be fetched is logged and left out; it never stops the rest of the archive.

    The sink is anything with an async ``write(chunk)`` that raises
    :class:`~zipper.core.exceptions.SinkClosedError` once it can no longer accept data.

    :param fetcher: a :class:`zipper.core.storage.ObjectFetcher`
    :param int chunk_size: bytes of archive to produce per sink write
    """

    def __init__(self, fetcher, chunk_size=None):
        self.fetcher = fetcher
        self.chunk_size = chunk_size or server_settings.CHUNK_SIZE

    async def stream(self, manifest, sink):
        """Stream every fetchable file in ``manifest`` into ``sink`` and finish the archive.

        Never raises for a bad entry.  If the sink breaks, the remaining entries are abandoned,
        the open object stream is closed and the central directory is not written.
        """
        tally = collections.Counter()
        entries = self._entries(manifest, tally)
        reader = streams.ZipStreamReader(entries)

        try:
            while True:
                chunk = await reader.read(self.chunk_size)
                if not chunk:
                    break
                await sink.write(chunk)
        except exceptions.SinkClosedError as exc:
            logger.error('Archive abandoned after {} of {} entries: {}'.format(
                tally['written'], len(manifest), exc.message))
            return
        finally:
            await entries.aclose()

        logger.info('Archive complete: {} entries written, {} skipped'.format(
            tally['written'], tally['skipped']))

    async def _entries(self, manifest, tally):
        """Yield ``(path, stream)`` for each descriptor that can be opened, closing each stream
        once the zip reader asks for the next entry or the generator is closed.
        """
        for descriptor in manifest:
            if not descriptor.storage_path:
                logger.warning('Missing path for file: {!r}'.format(descriptor))
                tally['skipped'] += 1
                continue

            path = utils.entry_path(descriptor.folder, descriptor.file_name)

            try:
                stream = await self.fetcher.open(descriptor.storage_path)
            except exceptions.NotFound as exc:
                logger.warning(exc.log_message)
                tally['skipped'] += 1
                continue
            except exceptions.FetchError as exc:
                logger.error('Error downloading "{}" - {}'.format(
                    descriptor.storage_path, exc.log_message))
                tally['skipped'] += 1
                continue

            try:
                yield path, stream
            finally:
                stream.close()

            tally['written'] += 1
