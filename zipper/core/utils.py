import re
import unicodedata
from urllib import parse


# Characters that carry meaning in a zip path, a filesystem path or a quoted header parameter
UNSAFE_FILENAME_RE = re.compile(r'[#<>:"/\\|?*]')

# Separators a stored folder value may use between its segments
FOLDER_SEPARATOR_RE = re.compile(r'[/\\]')

DEFAULT_ARCHIVE_NAME = 'download.zip'
DEFAULT_ENTRY_NAME = 'file'

# Path segments that name a directory rather than a file
DOT_SEGMENTS = ('', '.', '..')


def sanitize_filename(raw):
    """Remove every ``# < > : " / \\ | ? *`` from ``raw``.  Nothing else is touched: no case
    folding, no truncation, no unicode normalization.  The result may be the empty string, in
    which case the caller picks a default suited to where the name is going.

    :param str raw: an untrusted name
    :rtype: `str`
    """
    return UNSAFE_FILENAME_RE.sub('', raw)


def archive_name(requested):
    """The name to offer the client for the archive itself."""
    return sanitize_filename(requested or '') or DEFAULT_ARCHIVE_NAME


def entry_path(folder, file_name):
    """Build the in-archive path for one file.

    The folder is split into segments on either slash flavor and each segment sanitized on its
    own, so ``docs/2020/`` stays nested while ``../`` and ``C:\\`` can't climb out of the archive
    root.  Empty, ``.`` and ``..`` segments are dropped.  Exactly one ``/`` separates the folder
    from the file name, whether or not the stored folder ended with one.  A file name that is
    empty, ``.`` or ``..`` after sanitizing becomes ``file``.

    :param str folder: stored folder value, possibly empty
    :param str file_name: stored display name, possibly empty
    :rtype: `str`
    """
    segments = [
        segment for segment in (
            sanitize_filename(part) for part in FOLDER_SEPARATOR_RE.split(folder or '')
        )
        if segment not in DOT_SEGMENTS
    ]

    name = sanitize_filename(file_name or '')
    segments.append(DEFAULT_ENTRY_NAME if name in DOT_SEGMENTS else name)
    return '/'.join(segments)


def strip_for_disposition(filename):
    """Convert given filename to a form useable by a non-extended parameter.

    Converts non-ascii characters to their nearest ascii equivalent or strips them if there is no
    equivalent.  It then replaces control characters with underscores and escapes backslashes
    and double quotes.

    :param str filename: a filename to encode
    """
    nfkd_form = unicodedata.normalize('NFKD', filename)
    only_ascii = nfkd_form.encode('ASCII', 'ignore')
    no_ctrl = re.sub(r'[\x00-\x1f\x7f]', '_', only_ascii.decode('ascii'))
    return no_ctrl.replace('\\', '\\\\').replace('"', '\\"')


def encode_for_disposition(filename):
    """Convert given filename into utf-8 octets, then percent encode them.  See RFC-5987,
    Section 3.2.1.

    :param str filename: a filename to encode
    """
    return parse.quote(filename.encode('utf-8'))


def make_disposition(filename):
    """Generate the "Content-Disposition" header for an attachment.

    Plain ascii names produce exactly ``attachment; filename="<name>"``.  Anything that had to be
    changed to fit the quoted ``filename`` parameter also gets an RFC 5987 ``filename*`` with the
    full utf-8 name, which browsers prefer when present.

    :param str filename: the name of the file to be downloaded AS
    :rtype: `str`
    """
    stripped_filename = strip_for_disposition(filename)
    if stripped_filename == filename:
        return 'attachment; filename="{}"'.format(stripped_filename)

    return 'attachment; filename="{}"; filename*=UTF-8\'\'{}'.format(
        stripped_filename,
        encode_for_disposition(filename),
    )
