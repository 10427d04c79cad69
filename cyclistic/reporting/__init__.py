"""Diagnostic reporting"""

from .summary import TripSummary, build_summary, format_summary

__all__ = ['TripSummary', 'build_summary', 'format_summary']
