"""
Export of reconstructed files to the host filesystem
"""

import os
import logging

from .error import ExportError

log = logging.getLogger(__name__)


def host_name(name):
    """Diskette file name usable as a host file name"""
    return name.replace('/', '_').replace(os.sep, '_').replace('\0', '_')


class ExportSink:
    """Opens output files, optionally inside a per-image directory"""

    def __init__(self, directory=None):
        self.directory = directory

    @classmethod
    def for_image(cls, image_path, createdir=False):
        if not createdir:
            return cls()
        directory = os.path.basename(image_path) + '.dir'
        if not os.path.isdir(directory):
            try:
                os.mkdir(directory, 0o755)
            except OSError as e:
                raise ExportError(f"Can't create directory: {directory}: {e}") from e
        return cls(directory)

    def path(self, name):
        if self.directory:
            return os.path.join(self.directory, host_name(name))
        return host_name(name)

    def open(self, name):
        path = self.path(name)
        try:
            fd = open(path, 'wb')
        except OSError as e:
            raise ExportError(f"Can't create file: {path}: {e}") from e
        log.debug("Exporting %s to %s", name, path)
        return fd
