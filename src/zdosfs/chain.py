"""
ZDOS file record chains

A file is a forward-linked chain of records. A record spans
record_length / 128 consecutive sectors on one track; the last of them
carries the pointers to the neighbouring records.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .error import (CorruptDescriptor, Diagnostic, BACK_POINTER_MISMATCH,
                    CHAIN_END_MISMATCH, RECORD_COUNT_MISMATCH,
                    RECORD_LENGTH_MISMATCH)
from .sector import PAYLOAD_SIZE

log = logging.getLogger(__name__)


@dataclass
class ChainResult:
    records: int = 0
    sectors: int = 0
    last: Optional[Tuple[int, int]] = None
    terminated: bool = False
    written: int = 0


def walk_file(store, desc, out=None, check_backptr=False, analyze=False,
              report=None) -> ChainResult:
    """Rebuild a file's records, writing them to `out` if given

    Diagnostics go to `report`. Sector read errors propagate.
    """
    spr = desc.sectors_per_record
    if desc.record_count and (desc.record_length % PAYLOAD_SIZE or spr < 1):
        raise CorruptDescriptor(
            f"Record length {desc.record_length} is not a multiple of "
            f"{PAYLOAD_SIZE}")

    def diagnose(kind, message):
        log.debug(message)
        if report is not None:
            report(Diagnostic(kind, message))

    log.debug("  Record count: %d", desc.record_count)
    log.debug("  Record length: %d, sectors per record: %d",
              desc.record_length, spr)
    log.debug("  Last record length: %d", desc.last_record_length)
    log.debug("  First record: %d,%d", *desc.first_record)
    log.debug("  Last record: %d,%d", *desc.last_record)

    result = ChainResult()
    sector, track = desc.first_record
    previous = None

    for n in range(desc.record_count):
        record = bytearray()
        for i in range(spr):
            sec = store.read_sector(sector + i, track)
            result.sectors += 1
            log.debug(sec.dump())
            record += sec.payload
        result.records += 1
        result.last = (sector, track)

        if out is not None:
            if n + 1 == desc.record_count:
                chunk = record[:desc.last_record_length]
            else:
                chunk = record[:desc.record_length]
            out.write(chunk)
            result.written += len(chunk)

        if check_backptr and previous is not None and sec.back != previous:
            diagnose(BACK_POINTER_MISMATCH,
                     "Backward pointer of record %d at %d,%d is %d,%d, "
                     "expected %d,%d" % ((n, sector, track) + sec.back
                                         + previous))

        previous = (sector, track)
        sector, track = sec.forward
        if sec.at_end:
            result.terminated = True
            break

    log.debug("Sectors in file: %d, records in file: %d, "
              "record count in file header: %d",
              result.sectors, result.records, desc.record_count)

    if analyze:
        if desc.last_record_length > desc.record_length:
            diagnose(RECORD_LENGTH_MISMATCH,
                     f"Last record length {desc.last_record_length} exceeds "
                     f"record length {desc.record_length}")
        if result.last is not None and result.last != desc.last_record:
            diagnose(CHAIN_END_MISMATCH,
                     "Chain ends at %d,%d but descriptor says %d,%d"
                     % (result.last + desc.last_record))
        if result.records < desc.record_count:
            diagnose(RECORD_COUNT_MISMATCH,
                     f"Chain ended after {result.records} of "
                     f"{desc.record_count} records")
        elif desc.record_count and not result.terminated:
            diagnose(RECORD_COUNT_MISMATCH,
                     f"No end of chain after {desc.record_count} records")

    return result


def read_file(store, desc, **kwargs) -> bytes:
    """A file's reconstructed contents"""
    out = io.BytesIO()
    walk_file(store, desc, out=out, **kwargs)
    return out.getvalue()
