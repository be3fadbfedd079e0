"""Utility functions for switchbooks."""

from switchbooks.utils.date_parser import get_date_range, parse_date
from switchbooks.utils.amount_parser import parse_amount, quantize_amount

__all__ = ["get_date_range", "parse_date", "parse_amount", "quantize_amount"]
