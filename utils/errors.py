class EpubIOError(Exception):
    """Base class for every error raised while moving an EPUB in or out of a working directory."""

    pass


class LocatorError(EpubIOError):
    """The input path could not be inspected."""

    pass


class UnrecognizedSourceError(EpubIOError):
    """The path is neither a directory nor a file with a known extension."""

    pass


class AlreadyExistsError(EpubIOError):
    """An output that must be created fresh is already present."""

    pass


class CopyError(EpubIOError):
    pass


class ExtractError(EpubIOError):
    pass


class ArchiveWriteError(EpubIOError):
    """Failure while assembling an archive.

    `path` names the member (relative to the working directory) or the
    destination file involved, when there is one.
    """

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class StagingError(EpubIOError):
    """The temporary output directory could not be created."""

    pass


class PlacementError(EpubIOError):
    """The staged output was built but could not be moved over the destination.

    The destination may be missing or incomplete when this is raised.
    """

    pass


class TransformError(EpubIOError):
    def __init__(self, message, transform=None):
        super().__init__(message)
        self.transform = transform
