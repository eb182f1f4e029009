"""pft: site map construction and content consistency for PFT sites."""

__version__ = "0.6.0"

from .consistency import reconcile
from .content import Entry
from .errors import (
    ConfigurationError,
    DuplicateIdError,
    FilesystemError,
    HeaderError,
    HeaderParseError,
    InvalidVirtualHeaderError,
    MapBuildError,
    PftError,
    ReconcileError,
)
from .header import dump_header, load_header, parse_document
from .map import MapEntry, Node, NodeKind, SiteMap, build_map, make_node_id
from .models import Date, Diagnostic, Header, slugify
from .tree import ContentTree

__all__ = [
    "ConfigurationError",
    "ContentTree",
    "Date",
    "Diagnostic",
    "DuplicateIdError",
    "Entry",
    "FilesystemError",
    "Header",
    "HeaderError",
    "HeaderParseError",
    "InvalidVirtualHeaderError",
    "MapBuildError",
    "MapEntry",
    "Node",
    "NodeKind",
    "PftError",
    "ReconcileError",
    "SiteMap",
    "__version__",
    "build_map",
    "dump_header",
    "load_header",
    "make_node_id",
    "parse_document",
    "reconcile",
    "slugify",
]
