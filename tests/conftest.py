import os
import zipfile

import pytest


def write_tree(root, files):
    """Creates files (relative path -> bytes) under root."""
    for rel_path, content in files.items():
        path = os.path.join(root, *rel_path.split('/'))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(content)


def read_tree(root):
    """Returns {relative path: bytes} for every regular file under root."""
    result = {}
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            path = os.path.join(dirpath, name)
            rel_path = os.path.relpath(path, root).replace(os.sep, '/')
            with open(path, 'rb') as f:
                result[rel_path] = f.read()
    return result


def read_zip(path):
    with zipfile.ZipFile(path) as zf:
        return [(info.filename, info.compress_type, zf.read(info)) for info in zf.infolist()]


BOOK = {
    'META-INF/container.xml': b'<?xml version="1.0"?><container/>',
    'OEBPS/content.opf': b'<package version="3.0"></package>',
    'OEBPS/text/ch1.xhtml': b'<html><body><h1>One</h1><p>First</p><p>Second</p></body></html>',
    'OEBPS/images/cover.jpg': bytes(range(256)) * 8,
}


@pytest.fixture
def book_dir(tmp_path):
    root = tmp_path / 'book'
    write_tree(str(root), BOOK)
    return str(root)
