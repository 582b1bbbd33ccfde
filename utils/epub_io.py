"""
Moves an EPUB between its packed (.epub file) and unpacked (directory) forms.

Every strategy here is a plain function taking the path of the working
directory. Input functions (re)populate it, output functions read it and
produce a destination.
"""
import os
import stat
import shutil
import logging
import tempfile
import zipfile
from enum import Enum

from utils.errors import (
    AlreadyExistsError,
    ArchiveWriteError,
    CopyError,
    EpubIOError,
    ExtractError,
    LocatorError,
    PlacementError,
    StagingError,
    UnrecognizedSourceError,
)
from utils.fsutil import copy_dir, remove_all, unzip

EPUB_EXTENSION = '.epub'
MIMETYPE_NAME = 'mimetype'
MIMETYPE_CONTENT = b'application/epub+zip'


class SourceKind(Enum):
    DIRECTORY = 'directory'
    ARCHIVE = 'archive'
    UNRECOGNIZED = 'unrecognized'


def classify(path):
    """
    Tells whether path is an unpacked EPUB directory, an .epub archive or
    something else. Raises LocatorError when path cannot be stat'ed.
    """
    try:
        st = os.stat(path)
    except OSError as e:
        raise LocatorError(f"could not stat input {path!r}: {e}") from e

    if stat.S_ISDIR(st.st_mode):
        return SourceKind.DIRECTORY
    if os.path.splitext(path)[1] == EPUB_EXTENSION:
        return SourceKind.ARCHIVE
    return SourceKind.UNRECOGNIZED


def auto_input(path):
    """
    Picks dir_input or file_input depending on what path is.
    """
    kind = classify(path)
    if kind is SourceKind.DIRECTORY:
        return dir_input(path)
    if kind is SourceKind.ARCHIVE:
        return file_input(path)
    raise UnrecognizedSourceError(f"unrecognized input file {path!r}")


def auto_output(input_path, tmp_dir=None):
    """
    Picks an output of the same kind as input_path and writes back over it.
    The existing input is only replaced once the new output is complete.
    """
    kind = classify(input_path)
    if kind is SourceKind.DIRECTORY:
        return replace_output(input_path, dir_output, tmp_dir=tmp_dir)
    if kind is SourceKind.ARCHIVE:
        return replace_output(input_path, file_output, tmp_dir=tmp_dir)
    raise UnrecognizedSourceError(f"unrecognized input file {input_path!r}")


def replace_output(output_path, factory, tmp_dir=None):
    """
    Wraps a path-based output factory (dir_output, file_output) so that it can
    overwrite an existing output_path safely.

    The output is first built in a temporary directory. The real destination
    is only removed and replaced after that succeeds. If the final move
    fails, PlacementError is raised and output_path may be missing or
    incomplete.
    """
    target = os.path.normpath(output_path)

    def output(epubdir):
        try:
            td = tempfile.mkdtemp(prefix='epubio-', dir=tmp_dir)
        except OSError as e:
            raise StagingError(f"error creating temp output dir: {e}") from e

        try:
            staged = os.path.join(td, os.path.basename(target))
            factory(staged)(epubdir)

            try:
                remove_all(target)
                shutil.move(staged, target)
            except OSError as e:
                raise PlacementError(f"error copying output into place at {output_path!r}: {e}") from e
            logging.debug(f"Replaced {output_path}")
        finally:
            shutil.rmtree(td, ignore_errors=True)

    return output


def dir_input(src_dir):
    """
    Reads from an unpacked EPUB directory.
    """
    def populate(epubdir):
        try:
            remove_all(epubdir)
        except OSError as e:
            raise CopyError(f"error clearing working directory {epubdir!r}: {e}") from e
        copy_dir(src_dir, epubdir)
        logging.info(f"Loaded directory {src_dir}")

    return populate


def file_input(epub_file):
    """
    Reads from an .epub file.
    """
    def populate(epubdir):
        try:
            remove_all(epubdir)
        except OSError as e:
            raise ExtractError(f"error clearing working directory {epubdir!r}: {e}") from e
        unzip(epub_file, epubdir)
        logging.info(f"Extracted {epub_file}")

    return populate


def dir_output(dst_dir):
    """
    Writes to a directory. The destination must not exist.
    """
    def output(epubdir):
        if os.path.lexists(dst_dir):
            raise AlreadyExistsError(f"output directory {dst_dir!r} already exists")
        copy_dir(epubdir, dst_dir)
        logging.info(f"Wrote directory {dst_dir}")

    return output


def file_output(epub_file):
    """
    Writes to an .epub file. The destination must not exist.

    mimetype is always the first member and is stored uncompressed, every
    other regular file of the working directory follows in walk order.
    Modification times before 1980 are clamped to 1980 by zipfile.
    """
    def output(epubdir):
        try:
            f = open(epub_file, 'xb')
        except FileExistsError as e:
            raise AlreadyExistsError(f"output file {epub_file!r} already exists") from e
        except OSError as e:
            raise ArchiveWriteError(f"error creating destination file: {e}", path=epub_file) from e

        with f:
            try:
                with zipfile.ZipFile(f, 'w', compression=zipfile.ZIP_DEFLATED, strict_timestamps=False) as zf:
                    _write_mimetype(zf)
                    count = 0
                    for path, rel_path in walk_files(epubdir):
                        _write_member(zf, path, rel_path)
                        count += 1
            except EpubIOError:
                raise
            except (OSError, ValueError) as e:
                raise ArchiveWriteError(f"error finalizing epub: {e}", path=epub_file) from e

        logging.info(f"Wrote {epub_file} ({count + 1} entries)")

    return output


def walk_files(root, prefix=''):
    """
    Yields (path, relative path) for each regular file under root that should
    go into the archive, depth-first and in lexical order at each level.

    Directories are visited at their sorted position among their siblings.
    Symlinks and other non-regular files are skipped, and so is anything
    named mimetype, wherever it is in the tree.
    """
    try:
        names = sorted(os.listdir(root))
    except OSError as e:
        raise ArchiveWriteError(f"error reading directory {root!r}: {e}", path=prefix.rstrip('/') or '.') from e

    for name in names:
        path = os.path.join(root, name)
        rel_path = prefix + name
        try:
            mode = os.lstat(path).st_mode
        except OSError as e:
            raise ArchiveWriteError(f"error reading {rel_path!r}: {e}", path=rel_path) from e

        if stat.S_ISDIR(mode):
            yield from walk_files(path, rel_path + '/')
            continue
        if not stat.S_ISREG(mode) or name == MIMETYPE_NAME:
            continue
        yield path, rel_path


def _write_mimetype(zf):
    info = zipfile.ZipInfo(MIMETYPE_NAME)
    info.compress_type = zipfile.ZIP_STORED
    info.external_attr = 0o644 << 16
    try:
        zf.writestr(info, MIMETYPE_CONTENT)
    except (OSError, ValueError) as e:
        raise ArchiveWriteError(f"error writing mimetype to epub: {e}", path=MIMETYPE_NAME) from e


def _write_member(zf, path, rel_path):
    try:
        zf.write(path, arcname=rel_path, compress_type=zipfile.ZIP_DEFLATED)
    except (OSError, ValueError) as e:
        raise ArchiveWriteError(f"error writing file {rel_path!r} to epub: {e}", path=rel_path) from e
    logging.debug(f"Added {rel_path}")
