#!/usr/bin/env python3
"""
zdostool: list and export files from Zilog ZDOS diskette images
"""

import sys
import argparse
import logging

from . import __version__
from .descriptor import format_descriptor
from .error import ImageError
from .export import ExportSink
from .tool import ImageWalk, Options


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='zdostool',
        description="Tool to list and export files from Zilog ZDOS "
                    "diskette image FILES")
    parser.add_argument('images', nargs='+', metavar='IMAGEFILE',
                        help="diskette image to process")
    parser.add_argument('-a', '--analyze', action='store_true',
                        help="check file chains against their descriptors")
    parser.add_argument('-b', '--backptr', action='store_true',
                        help="check backward pointers of file records")
    parser.add_argument('-c', '--createdir', action='store_true',
                        help="create directory for each imagefile")
    parser.add_argument('-d', '--descriptor', action='store_true',
                        help="print file descriptors")
    parser.add_argument('-e', '--export', action='store_true',
                        help="export files from diskette image")
    parser.add_argument('-f', '--file', metavar='NAME',
                        help="name of the file if single file is listed or exported")
    parser.add_argument('-i', '--ignore', action='store_true',
                        help="ignore sector header mismatches")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="show details")
    parser.add_argument('-V', '--version', action='version',
                        version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def options_from_args(args):
    return Options(name=args.file,
                   descriptor=args.descriptor,
                   export=args.export,
                   createdir=args.createdir,
                   verbose=args.verbose,
                   analyze=args.analyze,
                   backptr=args.backptr,
                   ignore=args.ignore)


def run(paths, options, stdout=None):
    """Process images one after another; returns the exit status"""
    stdout = stdout or sys.stdout
    for path in paths:
        try:
            sink = None
            if options.export:
                sink = ExportSink.for_image(path, options.createdir)
                print(f"Exporting files from: {path}", file=stdout)
                if sink.directory:
                    print(f"into directory: {sink.directory}", file=stdout)
            for result in ImageWalk(path, options, sink):
                print(result.name, file=stdout)
                if options.descriptor and result.descriptor is not None:
                    for line in format_descriptor(result.descriptor):
                        print(line, file=stdout)
        except ImageError as e:
            print(f"** FATAL ERROR: {e}", file=sys.stderr)
            return 1
    return 0


def main(argv=None):
    """Command-line entry point"""
    args = parse_args(argv)
    options = options_from_args(args)
    level = logging.DEBUG if options.verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')
    return run(args.images, options)


if __name__ == '__main__':
    sys.exit(main())
