import tornado.iostream

from zipper.core import exceptions


def first_value(arguments, name):
    """The first value of query argument ``name`` as text, or `None` if it wasn't sent.

    :param dict arguments: tornado's ``request.query_arguments``, values are lists of `bytes`
    """
    values = arguments.get(name)
    if not values:
        return None
    return values[0].decode('utf-8', errors='replace')


class ResponseSink:
    """Adapts a tornado ``RequestHandler`` into the sink the archive streamer writes to.  Every
    write is flushed to the client before the next chunk is produced, which keeps the server
    from buffering more than one chunk per request.

    The first write commits the status and headers.
    """

    def __init__(self, handler):
        self.handler = handler
        self.bytes_written = 0

    async def write(self, chunk):
        try:
            self.handler.write(chunk)
            await self.handler.flush()
        except tornado.iostream.StreamClosedError:
            # Client has disconnected early.
            raise exceptions.SinkClosedError()
        self.bytes_written += len(chunk)
