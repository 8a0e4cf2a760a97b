from zipper.core.streams.base import BaseStream  # noqa
from zipper.core.streams.base import MultiStream  # noqa
from zipper.core.streams.base import StringStream  # noqa

from zipper.core.streams.s3 import ObjectStreamReader  # noqa

from zipper.core.streams.zip import ZipStreamReader  # noqa
