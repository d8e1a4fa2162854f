import struct

import pytest

from zdosfs.descriptor import PROCEDURE, DIRECTORY, ASCII, DATA

SECTOR = 136
TRACK = 32 * SECTOR
END = (0xFF, 0xFF)

HELLO = bytes((i * 7) & 0xFF for i in range(300))
PROG = bytes((i * 13 + 5) & 0xFF for i in range(600))


class ImageBuilder:
    """Well-formed ZDOS image assembled in memory"""

    def __init__(self, tracks=78):
        self.tracks = tracks
        self.data = bytearray(tracks * TRACK)
        for t in range(tracks):
            for s in range(32):
                off = s * SECTOR + t * TRACK
                self.data[off] = 0x80 | s
                self.data[off + 1] = t
                self.data[off + 130:off + 134] = bytes(4)

    def offset(self, sector, track):
        return sector * SECTOR + track * TRACK

    def sector(self, sector, track, payload=b'', back=(0, 0), fwd=END):
        off = self.offset(sector, track)
        payload = bytes(payload).ljust(128, b'\0')
        self.data[off + 2:off + 130] = payload
        self.data[off + 130:off + 132] = bytes(back)
        self.data[off + 132:off + 134] = bytes(fwd)

    def poke(self, sector, track, index, value):
        self.data[self.offset(sector, track) + index] = value

    def directory(self, *groups, start=(5, 22), end_marker=False):
        """Write directory sectors (sector 5.. on track 22), one per group"""
        coords = [(start[0] + n, start[1]) for n in range(len(groups))]
        if end_marker:
            coords.append((start[0] + len(groups), start[1]))
        for n, entries in enumerate(groups):
            payload = bytearray()
            for name, ptr in entries:
                raw = name.encode('latin-1')
                payload += bytes([len(raw)]) + raw + bytes(ptr)
            fwd = coords[n + 1] if n + 1 < len(coords) else END
            back = coords[n - 1] if n else (0, 0)
            self.sector(*coords[n], payload, back=back, fwd=fwd)
        if end_marker:
            self.sector(*coords[-1], b'\xff', back=coords[-2])

    def descriptor(self, at, first, last, count, reclen, lastlen, ftype=DATA,
                   reserved=bytes(4), file_id=b'\x01\x00', start_address=0,
                   segments=(), lowest=0, highest=0, stack=0,
                   created=b'021578', modified=b'030178'):
        p = bytearray(128)
        p[0:4] = reserved
        p[4:6] = file_id
        p[6:8] = bytes((5, 22))
        p[8:10] = bytes(first)
        p[10:12] = bytes(last)
        p[12] = ftype
        struct.pack_into('<HHHBHH', p, 13, count, reclen, reclen, 0x20,
                         start_address, lastlen)
        p[24:30] = created
        p[32:38] = modified
        for k, (start, length) in enumerate(segments):
            struct.pack_into('<HH', p, 40 + 4 * k, start, length)
        struct.pack_into('<HHH', p, 122, lowest, highest, stack)
        self.sector(*at, p)

    def records(self, coords, reclen, content, desc_at=(0, 0)):
        """Lay out content as a record chain; returns bytes in the last record"""
        spr = reclen // 128
        for n, (s, t) in enumerate(coords):
            chunk = content[n * reclen:(n + 1) * reclen]
            back = coords[n - 1] if n else desc_at
            fwd = coords[n + 1] if n + 1 < len(coords) else END
            for i in range(spr):
                part = chunk[i * 128:(i + 1) * 128]
                if i + 1 == spr:
                    self.sector(s + i, t, part, back=back, fwd=fwd)
                else:
                    self.sector(s + i, t, part,
                                back=(s + i - 1, t) if i else back,
                                fwd=(s + i + 1, t))
        return len(content) - (len(coords) - 1) * reclen

    def file(self, at, coords, reclen, content, **kwargs):
        lastlen = self.records(coords, reclen, content, desc_at=at)
        self.descriptor(at, coords[0], coords[-1], len(coords), reclen,
                        lastlen, **kwargs)

    def save(self, path):
        path.write_bytes(bytes(self.data))
        return str(path)


HELLO_AT = (10, 22)
HELLO_RECORDS = [(0, 30), (1, 30), (2, 30)]
PROG_AT = (11, 22)
PROG_RECORDS = [(0, 31), (2, 31), (4, 40)]
PROG_SEGMENTS = [(0x4400, 0x0200), (0x5000, 0x0058)]


def sample_builder(tracks=78):
    img = ImageBuilder(tracks)
    img.directory([('DIRECTORY', (4, 22)),
                   ('HELLO.S', HELLO_AT),
                   ('PROG', PROG_AT)])
    img.descriptor((4, 22), (5, 22), (5, 22), 1, 128, 128, ftype=DIRECTORY)
    img.file(HELLO_AT, HELLO_RECORDS, 128, HELLO, ftype=ASCII | 2)
    img.file(PROG_AT, PROG_RECORDS, 256, PROG, ftype=PROCEDURE | 1,
             start_address=0x4400, segments=PROG_SEGMENTS,
             lowest=0x4400, highest=0x5058, stack=0x80)
    return img


@pytest.fixture
def builder():
    return sample_builder()


@pytest.fixture
def image_path(builder, tmp_path):
    return builder.save(tmp_path / 'sample.img')
