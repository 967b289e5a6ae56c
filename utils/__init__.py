"""
Utility modules for the valuation engine.
"""

from .formatting import format_currency, format_percent, format_multiplier
from .config import Config

__all__ = ["format_currency", "format_percent", "format_multiplier", "Config"]
