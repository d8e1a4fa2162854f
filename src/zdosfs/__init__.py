"""
Zilog ZDOS diskette image tools
List, export and check files on MCZ ZDOS diskette images.
"""

__version__ = "0.1.0"

from .image import SectorStore
from .directory import walk_directory
from .descriptor import parse_descriptor
from .chain import walk_file, read_file
from .tool import ImageWalk, Options

__all__ = ["SectorStore", "walk_directory", "parse_descriptor", "walk_file",
           "read_file", "ImageWalk", "Options"]
