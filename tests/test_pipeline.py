import logging
import os

import pytest

from conftest import read_zip, write_tree
from utils.epub_io import auto_input, dir_output, file_output
from utils.errors import EpubIOError, ExtractError, TransformError
from utils.pipeline import Pipeline


def test_transforms_run_on_working_directory(tmp_path, book_dir):
    seen = []

    def add_page(epubdir):
        seen.append(epubdir)
        write_tree(epubdir, {'OEBPS/text/ch2.xhtml': b'<html><body><p>Two</p></body></html>'})

    scratch = tmp_path / 'scratch'
    scratch.mkdir()
    out = str(tmp_path / 'out.epub')
    Pipeline(add_page).run(auto_input(book_dir), file_output(out), tmp_dir=str(scratch))

    names = [e[0] for e in read_zip(out)]
    assert names[0] == 'mimetype'
    assert 'OEBPS/text/ch2.xhtml' in names
    assert os.path.dirname(seen[0]) == str(scratch)
    assert os.listdir(str(scratch)) == []


def test_transforms_run_in_order(tmp_path, book_dir):
    calls = []
    Pipeline(lambda d: calls.append('first'), lambda d: calls.append('second')).run(
        auto_input(book_dir), dir_output(str(tmp_path / 'out')))
    assert calls == ['first', 'second']


def test_failing_transform_is_wrapped(tmp_path, book_dir):
    def explode(epubdir):
        raise ValueError('bad markup')

    scratch = tmp_path / 'scratch'
    scratch.mkdir()
    out = tmp_path / 'out.epub'
    with pytest.raises(TransformError, match='explode') as excinfo:
        Pipeline(explode).run(auto_input(book_dir), file_output(str(out)), tmp_dir=str(scratch))

    assert excinfo.value.transform == 'explode'
    assert isinstance(excinfo.value.__cause__, ValueError)
    assert not out.exists()
    assert os.listdir(str(scratch)) == []


def test_input_errors_propagate_unchanged(tmp_path):
    bad = tmp_path / 'bad.epub'
    bad.write_bytes(b'garbage')
    with pytest.raises(ExtractError):
        Pipeline().run(auto_input(str(bad)), dir_output(str(tmp_path / 'out')))


def test_transform_may_raise_library_errors(tmp_path, book_dir):
    class Custom(EpubIOError):
        pass

    def refuse(epubdir):
        raise Custom('nope')

    with pytest.raises(Custom):
        Pipeline(refuse).run(auto_input(book_dir), dir_output(str(tmp_path / 'out')))


def test_audit_reports_mismatch(tmp_path, book_dir, caplog):
    def drop_paragraphs(epubdir):
        path = os.path.join(epubdir, 'OEBPS', 'text', 'ch1.xhtml')
        with open(path, 'w', encoding='utf-8') as f:
            f.write('<html><body><h1>One</h1></body></html>')

    with caplog.at_level(logging.INFO):
        Pipeline(drop_paragraphs, audit=True).run(auto_input(book_dir), dir_output(str(tmp_path / 'out')))

    assert 'MISMATCH: P - Before: 2, After: 0' in caplog.text
    assert 'MATCH: HEADING count: 1' in caplog.text
