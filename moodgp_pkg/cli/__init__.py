from .app import _health_check
from .app import build_parser
from .app import main_entry
from .app import search_options

__all__ = ["main_entry", "build_parser", "search_options", "_health_check"]
