"""
Reporting module for valuation results.

Provides the command line interface and plain-text summaries.
"""

from .summary import describe_target, format_summary

__all__ = ["describe_target", "format_summary"]
