"""
ZDOS diskette image access
Random sector reads by (sector, track) with bounds and header checks
"""

import os
import logging

from .error import (ImageError, InvalidGeometry, OutOfRange, TruncatedRead,
                    SectorMismatch)
from .sector import Sector, SECTOR_SIZE

log = logging.getLogger(__name__)

SECTORS_PER_TRACK = 32
TRACK_SIZE = SECTORS_PER_TRACK * SECTOR_SIZE

# image size -> end track (exclusive)
GEOMETRIES = {
    339456: 78,
    335104: 77,
}


def geometry(size):
    """Return the end track for an image of the given size, or None"""
    return GEOMETRIES.get(size)


def sector_offset(sector, track):
    return sector * SECTOR_SIZE + track * TRACK_SIZE


class SectorStore:
    """A ZDOS image opened for reading"""

    def __init__(self, fd, path, ignore_mismatch=False, on_mismatch=None):
        self.fd = fd
        self.path = path
        self.ignore_mismatch = ignore_mismatch
        self.on_mismatch = on_mismatch

        try:
            self.size = fd.seek(0, os.SEEK_END)
        except OSError as e:
            raise ImageError(f"Can't seek in file: {path}: {e}") from e

        self.endtrack = geometry(self.size)
        if self.endtrack is None:
            raise InvalidGeometry(path, self.size)
        log.debug("File size: %d, tracks: %d", self.size, self.endtrack)

    @classmethod
    def open(cls, path, ignore_mismatch=False, on_mismatch=None):
        try:
            fd = open(path, 'rb')
        except OSError as e:
            raise ImageError(f"Can't open file: {path}: {e}") from e
        try:
            return cls(fd, path, ignore_mismatch, on_mismatch)
        except ImageError:
            fd.close()
            raise

    def read_sector(self, sector, track):
        """Read one sector, checking its coordinates and self-description"""
        if not (0 <= sector < SECTORS_PER_TRACK and 0 <= track < self.endtrack):
            raise OutOfRange(sector, track, self.endtrack)

        try:
            self.fd.seek(sector_offset(sector, track))
        except OSError as e:
            raise ImageError(f"Can't seek in file: {self.path}: {e}") from e
        data = self.fd.read(SECTOR_SIZE)

        if len(data) != SECTOR_SIZE:
            raise TruncatedRead(sector, track, len(data))

        result = Sector(data)
        if not result.marked or (result.sector, result.track) != (sector, track):
            mismatch = SectorMismatch((sector, track),
                                      (result.sector, result.track),
                                      result.marked)
            if not self.ignore_mismatch:
                raise mismatch
            log.info("Ignoring: %s", mismatch)
            if self.on_mismatch is not None:
                self.on_mismatch(mismatch)
        return result

    def close(self):
        if self.fd:
            self.fd.close()
            self.fd = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
