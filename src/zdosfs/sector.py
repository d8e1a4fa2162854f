"""
ZDOS sector layout

    byte 0       sector number, high bit set
    byte 1       track number
    bytes 2-129  payload
    bytes 130-1  backward pointer (sector, track)
    bytes 132-3  forward pointer (sector, track), 0xFF,0xFF ends a chain
    bytes 134-5  CRC (not checked)
"""

import struct

SECTOR_SIZE = 136
PAYLOAD_SIZE = 128
END_OF_CHAIN = (0xFF, 0xFF)


class Sector:
    """Read-only view over one 136-byte sector"""

    __slots__ = ('data',)

    def __init__(self, data):
        if len(data) != SECTOR_SIZE:
            raise ValueError(f"Sector must be {SECTOR_SIZE} bytes, got {len(data)}")
        self.data = bytes(data)

    @property
    def sector(self):
        return self.data[0] & 0x7F

    @property
    def track(self):
        return self.data[1]

    @property
    def marked(self):
        return bool(self.data[0] & 0x80)

    @property
    def payload(self):
        return self.data[2:2 + PAYLOAD_SIZE]

    @property
    def back(self):
        return (self.data[130], self.data[131])

    @property
    def forward(self):
        return (self.data[132], self.data[133])

    @property
    def crc(self):
        return self.data[134:136]

    @property
    def at_end(self):
        return self.forward == END_OF_CHAIN

    def u16(self, offset):
        """Little-endian word at a payload offset"""
        return struct.unpack_from('<H', self.data, 2 + offset)[0]

    def dump(self):
        head = self.data[2:10]
        hexed = ' '.join(f"{b:02x}" for b in head)
        text = ''.join(chr(b) if 0x20 <= b < 0x7F else '.' for b in head)
        return (f"sect,track: {self.sector:2d},{self.track:2d}  {hexed}  {text}"
                f" back: {self.back[0]:2d},{self.back[1]:2d}"
                f" fwd: {self.forward[0]:2d},{self.forward[1]:2d}")

    def __repr__(self):
        return f"Sector({self.sector},{self.track})"
