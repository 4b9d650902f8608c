"""Parsers for the authored text formats (.mtl, .obj)."""

from .tokenizer import Tokenizer, iter_lines, strip_comment
from .mtl import MaterialRecord, MtlParseResult, parse_mtl, parse_mtl_file
from .obj import ObjSource, parse_obj, parse_obj_file

__all__ = [
    "Tokenizer",
    "iter_lines",
    "strip_comment",
    "MaterialRecord",
    "MtlParseResult",
    "parse_mtl",
    "parse_mtl_file",
    "ObjSource",
    "parse_obj",
    "parse_obj_file",
]
