import os
import shutil
import zipfile
import zlib
import logging

from utils.errors import CopyError, ExtractError


def remove_all(path):
    """
    Removes a file or a directory tree. A missing path is not an error.
    """
    if os.path.islink(path) or os.path.isfile(path):
        os.remove(path)
    elif os.path.isdir(path):
        shutil.rmtree(path)


def copy_dir(src, dst):
    """
    Recursively copies the directory src to dst, file contents included.
    dst must not exist yet; its parent must. Whatever was copied before a
    failure is left in place.
    """
    try:
        shutil.copytree(src, dst, symlinks=True)
    except (OSError, shutil.Error) as e:
        raise CopyError(f"error copying directory {src!r} to {dst!r}: {e}") from e
    logging.debug(f"Copied {src} -> {dst}")


def unzip(archive_path, dest):
    """
    Extracts every entry of a zip archive into dest, creating dest if needed.
    Entry names are sanitized by zipfile (no absolute paths, no '..').
    """
    try:
        os.makedirs(dest, exist_ok=True)
        with zipfile.ZipFile(archive_path, 'r') as zip_ref:
            zip_ref.extractall(dest)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError) as e:
        raise ExtractError(f"error extracting {archive_path!r}: {e}") from e
    logging.debug(f"Extracted {archive_path} -> {dest}")
