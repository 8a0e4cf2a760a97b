import abc
import asyncio


class BaseStream(asyncio.StreamReader, metaclass=abc.ABCMeta):
    """A wrapper class around an existing source of bytes.  Though it inherits from
    `asyncio.StreamReader` it does not implement/augment all of its methods.  Only ``read()`` is
    supported; ``readexactly``, ``readline``, and ``readuntil`` are not.

    Classes that inherit from `BaseStream` must implement a ``_read()`` method that reads ``size``
    bytes from its source and returns it, calling ``feed_eof()`` once the source is exhausted.
    """

    @property
    @abc.abstractmethod
    def size(self):
        pass

    async def read(self, size=-1):
        return await self._read(size)

    @abc.abstractmethod
    async def _read(self, size):
        pass


class MultiStream(asyncio.StreamReader):
    """Concatenate a series of `StreamReader` objects into a single stream.
    Reads from the current stream until exhausted, then continues to the next, etc.
    """
    def __init__(self, *streams):
        super().__init__()
        self._size = 0
        self.stream = None
        self._streams = []

        self.add_streams(*streams)

    @property
    def size(self):
        return self._size

    @property
    def streams(self):
        return self._streams

    def add_streams(self, *streams):
        self._size += sum(x.size for x in streams)
        self._streams.extend(streams)

        if not self.stream:
            self._cycle()

    async def read(self, n=-1):
        chunk = b''

        while self.stream and (len(chunk) < n or n == -1):
            if n == -1:
                chunk += await self.stream.read(-1)
            else:
                chunk += await self.stream.read(n - len(chunk))

            if self.stream.at_eof():
                self._cycle()

        return chunk

    def _cycle(self):
        try:
            self.stream = self.streams.pop(0)
        except IndexError:
            self.stream = None
            self.feed_eof()


class StringStream(BaseStream):
    def __init__(self, data):
        super().__init__()
        if isinstance(data, str):
            data = data.encode('UTF-8')
        elif not isinstance(data, bytes):
            raise TypeError('Data must be either str or bytes, found {!r}'.format(type(data)))

        self._size = len(data)
        self.feed_data(data)
        self.feed_eof()

    @property
    def size(self):
        return self._size

    async def _read(self, n=-1):
        return (await asyncio.StreamReader.read(self, n))
