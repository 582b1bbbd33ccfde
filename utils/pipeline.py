import shutil
import logging
import tempfile
import time

from modules import auditor
from utils.errors import EpubIOError, StagingError, TransformError


class Pipeline:
    """
    Runs an input function, a list of transforms and an output function over
    a fresh temporary working directory.

    A transform is any callable taking the working directory path.
    """

    def __init__(self, *transforms, audit=False):
        self.transforms = list(transforms)
        self.audit = audit

    def run(self, input_fn, output_fn, tmp_dir=None):
        try:
            work_dir = tempfile.mkdtemp(prefix='epubtransform-', dir=tmp_dir)
        except OSError as e:
            raise StagingError(f"error creating working directory: {e}") from e

        try:
            self._timed("Input", input_fn, work_dir)

            if self.audit:
                start_stats = auditor.count_elements(work_dir, "BEFORE")

            for transform in self.transforms:
                self._timed(_name_of(transform), self._apply, transform, work_dir)

            if self.audit:
                end_stats = auditor.count_elements(work_dir, "AFTER")
                auditor.compare(start_stats, end_stats)

            self._timed("Output", output_fn, work_dir)
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)
            logging.debug(f"Cleaned up {work_dir}")

    @staticmethod
    def _apply(transform, work_dir):
        try:
            transform(work_dir)
        except EpubIOError:
            raise
        except Exception as e:
            name = _name_of(transform)
            raise TransformError(f"error running transform {name}: {e}", transform=name) from e

    @staticmethod
    def _timed(label, fn, *args):
        start = time.time()
        fn(*args)
        logging.info(f"{label} completed in {time.time() - start:.2f}s")


def _name_of(transform):
    return getattr(transform, '__name__', None) or type(transform).__name__
