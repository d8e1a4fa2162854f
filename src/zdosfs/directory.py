"""
ZDOS directory traversal

The directory is a chain of sectors starting at sector 5, track 22. Each
payload holds packed entries: a length byte, the name, then the
(sector, track) of the file's descriptor.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .error import ChainLoop
from .sector import PAYLOAD_SIZE

log = logging.getLogger(__name__)

DIRECTORY_ROOT = (5, 22)
DIRECTORY_NAME = 'DIRECTORY'
NAME_MAX = 32


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    descriptor: Tuple[int, int]

    @property
    def is_directory(self):
        return self.name == DIRECTORY_NAME


def iter_entries(sector) -> Iterator[DirectoryEntry]:
    """Entries packed in one directory sector"""
    payload = sector.payload
    pos = 0
    while pos < PAYLOAD_SIZE:
        length = payload[pos] & 0x7F
        if length == 0 or payload[pos] == 0xFF:
            break
        end = pos + 1 + length
        if end + 2 > PAYLOAD_SIZE:
            log.debug("Entry at %d runs past directory sector %d,%d",
                      pos, sector.sector, sector.track)
            break
        name = payload[pos + 1:end].decode('latin-1')
        yield DirectoryEntry(name, (payload[end], payload[end + 1]))
        pos = end + 2


def walk_directory(store, start=DIRECTORY_ROOT) -> Iterator[DirectoryEntry]:
    """All entries of the directory chain

    Sector read errors propagate; the caller stops the walk there.
    """
    sector, track = start
    seen = set()
    while True:
        if (sector, track) in seen:
            raise ChainLoop(sector, track)
        seen.add((sector, track))

        dirsec = store.read_sector(sector, track)
        if dirsec.payload[0] == 0xFF:
            return
        yield from iter_entries(dirsec)
        if dirsec.at_end:
            return
        sector, track = dirsec.forward


def name_matches(name: str, wanted: Optional[str]) -> bool:
    """No filter selects everything, otherwise an exact match on 32 chars"""
    if wanted is None:
        return True
    return name[:NAME_MAX] == wanted[:NAME_MAX]
