"""
Exceptions and diagnostics for ZDOS image decoding.

ImageError and its subclasses end processing of an image. SectorError and
CorruptDescriptor only abandon the current file (or the directory walk).
Diagnostic records findings that never change control flow.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


class ZDOSError(Exception):
    """Base class for all ZDOS decoding errors"""


class ImageError(ZDOSError):
    """The image cannot be used at all"""


class InvalidGeometry(ImageError):
    def __init__(self, path, size):
        super().__init__(f"Invalid file size: {path}: {size} bytes")
        self.path = path
        self.size = size


class ExportError(ImageError):
    """An export directory or file could not be created"""


class SectorError(ZDOSError):
    """A sector could not be read or is not the sector asked for"""


class OutOfRange(SectorError):
    def __init__(self, sector, track, endtrack):
        if not 0 <= sector < 32:
            what = f"Sector out of range: {sector}"
        else:
            what = f"Track out of range: {track}"
        super().__init__(f"{what} (endtrack {endtrack})")
        self.sector = sector
        self.track = track


class TruncatedRead(SectorError):
    def __init__(self, sector, track, got):
        super().__init__(f"Short read of sector {sector},{track}: got {got} bytes")
        self.sector = sector
        self.track = track
        self.got = got


class SectorMismatch(SectorError):
    def __init__(self, expected: Tuple[int, int], found: Tuple[int, int],
                 marked: bool = True):
        msg = (f"Sector header mismatch: expected {expected[0]},{expected[1]} "
               f"found {found[0]},{found[1]}")
        if not marked:
            msg += " (sector marker bit clear)"
        super().__init__(msg)
        self.expected = expected
        self.found = found
        self.marked = marked


class ChainLoop(SectorError):
    def __init__(self, sector, track):
        super().__init__(f"Chain revisits sector {sector},{track}")
        self.sector = sector
        self.track = track


class CorruptDescriptor(ZDOSError):
    """Reserved descriptor bytes are set or record geometry is impossible"""


SECTOR_MISMATCH = 'sector-mismatch'
CORRUPT_DESCRIPTOR = 'corrupt-descriptor'
BACK_POINTER_MISMATCH = 'back-pointer-mismatch'
CHAIN_END_MISMATCH = 'chain-end-mismatch'
RECORD_COUNT_MISMATCH = 'record-count-mismatch'
RECORD_LENGTH_MISMATCH = 'record-length-mismatch'
UNREADABLE_SECTOR = 'unreadable-sector'


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    message: str
    image: Optional[str] = None
    file: Optional[str] = None

    def __str__(self):
        where = ': '.join(x for x in (self.image, self.file) if x)
        if where:
            return f"{where}: {self.message}"
        return self.message
