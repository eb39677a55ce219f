"""SSF Core - Shared save container codecs and the property patch engine."""
from .container import decode_container, encode_container
from .blocks import parse_blocks, build_blocks
from .patch import apply_property_patch

__all__ = ["decode_container", "encode_container", "parse_blocks", "build_blocks", "apply_property_patch"]
