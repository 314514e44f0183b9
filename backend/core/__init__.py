"""
Core package for MDView.
Provides the TOON encoder, JSON and markdown helpers, and document storage
behind the MDView markdown/JSON viewer.
"""

__version__ = "1.2.0"

from .json_utils import build_tree, format_json, json_to_toon, parse_json
from .toon_encoder import ToonEncoder, encode_to_toon
