#!/usr/bin/env python3
"""
Zilog ZDOS FUSE Filesystem
Read-only FUSE filesystem for Zilog MCZ ZDOS diskette images
"""

import os
import sys
import errno
import argparse
import logging
import ctypes.util

# Monkeypatch find_library to support fuse-t on macOS
_original_find_library = ctypes.util.find_library

def _find_library(name):
    if name == 'fuse':
        # Check for fuse-t
        if os.path.exists('/usr/local/lib/libfuse-t.dylib'):
            return '/usr/local/lib/libfuse-t.dylib'
    return _original_find_library(name)

ctypes.util.find_library = _find_library

from fuse import FUSE, FuseOSError, Operations

from .chain import read_file
from .descriptor import parse_descriptor
from .directory import walk_directory
from .error import ZDOSError, SectorError
from .export import host_name
from .image import SectorStore

log = logging.getLogger(__name__)


class ZDOSFS(Operations):
    """FUSE filesystem for ZDOS diskette images"""

    def __init__(self, image_path, ignore_mismatch=False, check_backptr=False):
        self.image_path = image_path
        self.store = SectorStore.open(image_path, ignore_mismatch=ignore_mismatch)
        self.check_backptr = check_backptr
        self.files = {}  # host name -> FileDescriptor
        self._file_cache = {}  # Cache file data for performance
        self._parse_directory()

    def _parse_directory(self):
        """Read the directory chain and the descriptor of every file"""
        entries = walk_directory(self.store)
        while True:
            try:
                entry = next(entries)
            except StopIteration:
                break
            except SectorError as e:
                log.warning("%s: directory: %s", self.image_path, e)
                break

            if entry.is_directory:
                continue
            try:
                desc = parse_descriptor(self.store.read_sector(*entry.descriptor))
            except SectorError as e:
                log.warning("%s: %s: %s", self.image_path, entry.name, e)
                continue
            if desc.corrupt:
                log.warning("%s: %s: corrupt descriptor, not shown",
                            self.image_path, entry.name)
                continue

            # Duplicate names are not expected; last one wins
            self.files[host_name(entry.name)] = desc

    def _read_file_data(self, filename):
        """Read complete file data by following the record chain"""
        if filename not in self.files:
            return b''

        # Check cache first
        if filename in self._file_cache:
            return self._file_cache[filename]

        try:
            result = read_file(self.store, self.files[filename],
                               check_backptr=self.check_backptr,
                               report=lambda d: log.warning("%s: %s", filename, d))
        except ZDOSError as e:
            log.warning("%s: %s: %s", self.image_path, filename, e)
            raise FuseOSError(errno.EIO)

        self._file_cache[filename] = result
        return result

    # FUSE Operations
    # ===============

    def getattr(self, path, fh=None):
        """Get file/directory attributes"""
        if path == '/':
            return dict(st_mode=(0o40555), st_nlink=2)

        filename = path[1:]  # strip leading /
        if filename in self.files:
            st_size = len(self._read_file_data(filename))
            return dict(st_mode=(0o100444), st_nlink=1, st_size=st_size)

        raise FuseOSError(errno.ENOENT)

    def readdir(self, path, fh):
        """List directory contents"""
        return ['.', '..'] + list(self.files.keys())

    def read(self, path, length, offset, fh):
        """Read data from file"""
        filename = path[1:]
        if filename not in self.files:
            raise FuseOSError(errno.ENOENT)

        # Read file data (cached after first read)
        data = self._read_file_data(filename)
        return data[offset:offset + length]

    def destroy(self, path):
        """Clean up resources when unmounting"""
        self.store.close()


def mount(image_path: str, mount_point: str, foreground: bool = True,
          ignore_mismatch: bool = False, check_backptr: bool = False):
    """Mount a ZDOS diskette image read-only"""
    if not os.path.exists(mount_point):
        os.makedirs(mount_point)

    filesystem = ZDOSFS(image_path, ignore_mismatch, check_backptr)
    FUSE(filesystem, mount_point, nothreads=True, foreground=foreground, ro=True)


def main(argv=None):
    """Command-line entry point"""
    parser = argparse.ArgumentParser(
        prog='zdosmount',
        description="Mount a Zilog ZDOS diskette image as a read-only FUSE filesystem.")
    parser.add_argument('image', help="diskette image file")
    parser.add_argument('mountpoint', help="directory to mount the filesystem on")
    parser.add_argument('-i', '--ignore', action='store_true',
                        help="ignore sector header mismatches")
    parser.add_argument('-b', '--backptr', action='store_true',
                        help="log backward pointer mismatches")
    parser.add_argument('--debug', action='store_true',
                        help="enable debug logging")
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.debug else logging.WARNING
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        mount(args.image, args.mountpoint, foreground=True,
              ignore_mismatch=args.ignore, check_backptr=args.backptr)
    except ZDOSError as e:
        print(f"Failed to mount: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
