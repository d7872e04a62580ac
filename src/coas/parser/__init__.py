"""YAML parsing and source-position recovery."""

from coas.parser.loader import DocumentLoader, DocumentSafetyError, ParseError, looks_like_openapi
from coas.parser.locator import Position, TextLocator, locate
from coas.parser.nodes import MappingNode, ScalarNode, SequenceNode, build_tree

__all__ = [
    "DocumentLoader",
    "DocumentSafetyError",
    "MappingNode",
    "ParseError",
    "Position",
    "ScalarNode",
    "SequenceNode",
    "TextLocator",
    "build_tree",
    "locate",
    "looks_like_openapi",
]
