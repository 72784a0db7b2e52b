"""Utility functions for fincore."""

from fincore.utils.date_parser import parse_date
from fincore.utils.amount_parser import parse_amount
from fincore.utils.money import to_money, ZERO

__all__ = ["parse_date", "parse_amount", "to_money", "ZERO"]
