"""Display formatting shared by notification templates"""

from datetime import date, datetime
from typing import Optional, Union


def format_amount(amount: Optional[float]) -> str:
    """15000 -> '15 000'"""
    return f"{amount or 0:,.0f}".replace(",", " ")


def format_date_fr(value: Optional[Union[date, datetime]]) -> str:
    """French short date, e.g. 05/03/2025"""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_time_fr(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%H:%M")
