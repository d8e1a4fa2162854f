"""
Traversal of one ZDOS image: directory, descriptors and file chains

Errors local to one file are turned into diagnostics and the walk moves
on to the next directory entry. ImageError propagates to the caller.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from .chain import walk_file
from .descriptor import FileDescriptor, parse_descriptor, check_descriptor
from .directory import walk_directory, name_matches
from .error import (SectorError, SectorMismatch, CorruptDescriptor,
                    Diagnostic, SECTOR_MISMATCH, CORRUPT_DESCRIPTOR,
                    UNREADABLE_SECTOR)
from .export import ExportSink
from .image import SectorStore

log = logging.getLogger(__name__)


@dataclass
class Options:
    name: Optional[str] = None
    descriptor: bool = False
    export: bool = False
    createdir: bool = False
    verbose: bool = False
    analyze: bool = False
    backptr: bool = False
    ignore: bool = False


@dataclass
class FileResult:
    name: str
    descriptor: Optional[FileDescriptor] = None
    size: Optional[int] = None


class ImageWalk:
    """Iterate over the selected files of one image

    Each file is yielded once it has been fully processed. Findings are
    collected in `diagnostics`.
    """

    def __init__(self, path, options=None, sink=None):
        self.path = path
        self.options = options or Options()
        self.sink = sink
        self.diagnostics: List[Diagnostic] = []
        self._file = None

    def report(self, diag):
        diag = replace(diag, image=self.path, file=self._file)
        self.diagnostics.append(diag)
        log.warning("%s", diag)

    def _sector_error(self, err):
        kind = SECTOR_MISMATCH if isinstance(err, SectorMismatch) else UNREADABLE_SECTOR
        self.report(Diagnostic(kind, str(err)))

    def __iter__(self):
        opts = self.options
        if opts.export and self.sink is None:
            self.sink = ExportSink.for_image(self.path, opts.createdir)

        with SectorStore.open(self.path, ignore_mismatch=opts.ignore,
                              on_mismatch=self._sector_error) as store:
            entries = walk_directory(store)
            while True:
                self._file = None
                try:
                    entry = next(entries)
                except StopIteration:
                    return
                except SectorError as e:
                    # A bad directory sector ends the directory
                    self._sector_error(e)
                    return
                if not name_matches(entry.name, opts.name):
                    continue
                self._file = entry.name
                yield self._process(store, entry)

    def _process(self, store, entry):
        result = FileResult(entry.name)
        try:
            dsec = store.read_sector(*entry.descriptor)
        except SectorError as e:
            self._sector_error(e)
            return result

        desc = parse_descriptor(dsec)
        result.descriptor = desc
        try:
            check_descriptor(desc)
        except CorruptDescriptor as e:
            self.report(Diagnostic(CORRUPT_DESCRIPTOR, str(e)))
            return result

        if entry.is_directory:
            return result
        result.size = self._walk(store, entry, desc)
        return result

    def _walk(self, store, entry, desc):
        opts = self.options
        log.debug("Go through file: %s", entry.name)
        out = self.sink.open(entry.name) if opts.export else None
        try:
            chain = walk_file(store, desc, out=out,
                              check_backptr=opts.backptr,
                              analyze=opts.analyze,
                              report=self.report)
        except SectorError as e:
            self._sector_error(e)
            return None
        except CorruptDescriptor as e:
            self.report(Diagnostic(CORRUPT_DESCRIPTOR, str(e)))
            return None
        finally:
            if out is not None:
                out.close()
        return chain.written if out is not None else None
