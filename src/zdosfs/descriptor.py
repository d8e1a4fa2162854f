"""
ZDOS file descriptors

A descriptor sector describes one file: its type, record geometry, the
first and last record of its chain and, for procedure files, the segment
table used to load it. Offsets below are relative to the sector payload.
"""

from dataclasses import dataclass
from typing import List, Tuple

from .error import CorruptDescriptor
from .sector import PAYLOAD_SIZE

PROCEDURE = 0x80
DIRECTORY = 0x40
ASCII = 0x20
DATA = 0x10

TYPE_NAMES = (
    (PROCEDURE, 'Procedure'),
    (DIRECTORY, 'Directory'),
    (ASCII, 'ASCII text'),
    (DATA, 'Data'),
)

SEGMENT_TABLE = 40
SEGMENT_MAX = 17


@dataclass(frozen=True)
class Segment:
    start: int
    length: int


@dataclass(frozen=True)
class FileDescriptor:
    reserved: bytes
    file_id: bytes
    directory_sector: Tuple[int, int]
    first_record: Tuple[int, int]
    last_record: Tuple[int, int]
    file_type: int
    record_count: int
    record_length: int
    block_length: int
    properties: int
    start_address: int
    last_record_length: int
    created: bytes
    modified: bytes
    segments: Tuple[Segment, ...] = ()
    lowest_address: int = 0
    highest_address: int = 0
    stack_size: int = 0

    @property
    def corrupt(self):
        return any(self.reserved)

    @property
    def is_procedure(self):
        return bool(self.file_type & PROCEDURE)

    @property
    def subtype(self):
        return self.file_type & 0x0F

    @property
    def type_name(self):
        return ''.join(name for bit, name in TYPE_NAMES if self.file_type & bit)

    @property
    def sectors_per_record(self):
        return self.record_length // PAYLOAD_SIZE

    @property
    def expected_length(self):
        if self.record_count == 0:
            return 0
        return ((self.record_count - 1) * self.record_length
                + self.last_record_length)


def parse_descriptor(sector) -> FileDescriptor:
    p = sector.payload
    u16 = sector.u16

    segments: List[Segment] = []
    lowest = highest = stack = 0
    if p[12] & PROCEDURE:
        for k in range(SEGMENT_MAX):
            start = u16(SEGMENT_TABLE + 4 * k)
            length = u16(SEGMENT_TABLE + 4 * k + 2)
            if start == 0 and length == 0:
                break
            segments.append(Segment(start, length))
        lowest, highest, stack = u16(122), u16(124), u16(126)

    return FileDescriptor(
        reserved=p[0:4],
        file_id=p[4:6],
        directory_sector=(p[6], p[7]),
        first_record=(p[8], p[9]),
        last_record=(p[10], p[11]),
        file_type=p[12],
        record_count=u16(13),
        record_length=u16(15),
        block_length=u16(17),
        properties=p[19],
        start_address=u16(20),
        last_record_length=u16(22),
        created=p[24:30],
        modified=p[32:38],
        segments=tuple(segments),
        lowest_address=lowest,
        highest_address=highest,
        stack_size=stack)


def check_descriptor(desc):
    if desc.corrupt:
        raise CorruptDescriptor(
            "Reserved descriptor bytes not zero: "
            + ' '.join(f"0x{b:02x}" for b in desc.reserved))


def _date(raw):
    return raw.split(b'\0', 1)[0].decode('latin-1')


def format_descriptor(desc) -> List[str]:
    """Indented descriptor listing, one line per field"""
    lines = [
        "  Reserved: " + ' '.join(f"0x{b:02x}" for b in desc.reserved),
        "  File ID: " + ' '.join(f"0x{b:02x}" for b in desc.file_id),
        "  Directory sector: %d,%d" % desc.directory_sector,
        "  First record: %d,%d" % desc.first_record,
        "  Last record: %d,%d" % desc.last_record,
        f"  File type and subtype: 0x{desc.file_type:02x}, "
        f"{desc.type_name}, subtype: {desc.subtype}",
        f"  Record count: {desc.record_count}",
        f"  Record length: {desc.record_length}",
        f"  Block length: {desc.block_length}",
        f"  File properties: 0x{desc.properties:02x}",
    ]
    if desc.is_procedure:
        lines.append(f"  Procedure start address: 0x{desc.start_address:04x}")
    lines += [
        f"  Bytes in last record: {desc.last_record_length}",
        f"  Date of creation: {_date(desc.created)}",
        f"  Date of last modification: {_date(desc.modified)}",
    ]
    if desc.is_procedure:
        lines.append("  Segment descriptors")
        for n, seg in enumerate(desc.segments):
            lines.append(f"    Segment {n}: start address: 0x{seg.start:04x}, "
                         f"length: 0x{seg.length:04x}")
        lines += [
            f"  Lowest segment starting address: 0x{desc.lowest_address:04x}",
            f"  Highest segment ending address: 0x{desc.highest_address:04x}",
            f"  Stack size: 0x{desc.stack_size:04x}",
        ]
    return lines
