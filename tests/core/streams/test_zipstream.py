import io
import os
import zipfile

import pytest

from zipper.core import streams
from zipper.core.streams.zip import EMPTY_ZIP_FILE


async def entries(*pairs):
    for name, data in pairs:
        yield name, streams.StringStream(data)


async def read_all(reader, chunk_size):
    data = b''
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            break
        data += chunk
    return data


class TestZipStreamReader:

    @pytest.mark.asyncio
    async def test_single_file(self):
        data = b'freddie brian john roger'
        reader = streams.ZipStreamReader(entries(('file.txt', data)))

        archive = zipfile.ZipFile(io.BytesIO(await read_all(reader, 1024)))

        assert archive.testzip() is None
        assert archive.namelist() == ['file.txt']
        assert archive.read('file.txt') == data

        info = archive.getinfo('file.txt')
        assert info.compress_type == zipfile.ZIP_DEFLATED
        assert info.file_size == len(data)

    @pytest.mark.asyncio
    @pytest.mark.parametrize('chunk_size', [1, 7, 64, 65536])
    async def test_multiple_files_in_order(self, chunk_size):
        files = [
            ('a.txt', b'a' * 1000),
            ('docs/b.txt', b'hello world\n' * 50),
            ('docs/c.bin', os.urandom(5000)),
        ]
        reader = streams.ZipStreamReader(entries(*files))

        archive = zipfile.ZipFile(io.BytesIO(await read_all(reader, chunk_size)))

        assert archive.testzip() is None
        assert archive.namelist() == [name for name, _ in files]
        for name, data in files:
            assert archive.read(name) == data

    @pytest.mark.asyncio
    async def test_empty_file(self):
        reader = streams.ZipStreamReader(entries(('empty.txt', b''), ('full.txt', b'data')))

        archive = zipfile.ZipFile(io.BytesIO(await read_all(reader, 1024)))

        assert archive.testzip() is None
        assert archive.read('empty.txt') == b''
        assert archive.read('full.txt') == b'data'

    @pytest.mark.asyncio
    async def test_no_files(self):
        reader = streams.ZipStreamReader(entries())

        data = await read_all(reader, 1024)

        assert data == EMPTY_ZIP_FILE
        assert zipfile.ZipFile(io.BytesIO(data)).namelist() == []
        assert reader.at_eof()

    @pytest.mark.asyncio
    async def test_central_directory_written_once(self):
        reader = streams.ZipStreamReader(entries(('a.txt', b'a')))

        data = await read_all(reader, 1024)

        assert data.count(b'PK\x05\x06') == 1
        assert await reader.read(1024) == b''

    @pytest.mark.asyncio
    async def test_unicode_names(self):
        reader = streams.ZipStreamReader(entries(('résumé.txt', b'cv')))

        archive = zipfile.ZipFile(io.BytesIO(await read_all(reader, 1024)))

        assert archive.namelist() == ['résumé.txt']
        assert archive.read('résumé.txt') == b'cv'

    @pytest.mark.asyncio
    async def test_entries_pulled_lazily(self):
        pulled = []

        async def tracking():
            for name in ('a.txt', 'b.txt'):
                pulled.append(name)
                yield name, streams.StringStream(b'x' * 10000)

        reader = streams.ZipStreamReader(tracking())

        await reader.read(10)

        assert pulled == ['a.txt']
