"""
Value Parsing Rules for AgroInsight v1.0
========================================
Locale-aware number parsing and missing-value detection.

The same rule decides whether a cell "is a number" for the variable
classifier, the descriptive statistics engine and the correlation engine,
so the three can never disagree about a column.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, FrozenSet, Iterable, List, Optional

import numpy as np
import pandas as pd

from agroinsight.config import ParsingConfig


DATE_PATTERNS = (
    re.compile(r'^\d{4}-\d{2}-\d{2}$'),    # YYYY-MM-DD
    re.compile(r'^\d{2}/\d{2}/\d{4}$'),    # DD/MM/YYYY
    re.compile(r'^\d{4}/\d{2}/\d{2}$'),    # YYYY/MM/DD
    re.compile(r'^\d{2}-\d{2}-\d{4}$'),    # DD-MM-YYYY
)


@dataclass(frozen=True)
class NumberParsingRule:
    """Explicit parsing rule for numeric cells.

    Attributes:
        decimal_comma: accept "10,5" as 10.5
        allow_thousands_separator: accept "1.234,56" (and "1,234.56")
        null_tokens: lower-cased strings treated as missing
    """
    decimal_comma: bool = True
    allow_thousands_separator: bool = True
    null_tokens: FrozenSet[str] = frozenset(
        {"null", "undefined", "none", "nan", "na", "n/a", "-"}
    )

    @classmethod
    def from_config(cls, config: ParsingConfig) -> 'NumberParsingRule':
        return cls(
            decimal_comma=config.decimal_comma,
            allow_thousands_separator=config.allow_thousands_separator,
            null_tokens=frozenset(token.lower() for token in config.null_tokens),
        )

    def is_missing(self, value: Any) -> bool:
        """True for None, NaN/NaT, blank strings and null tokens"""
        if value is None:
            return True
        if isinstance(value, str):
            stripped = value.strip()
            return stripped == '' or stripped.lower() in self.null_tokens
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            # list-like cells are not missing scalars
            return False

    def parse_number(self, value: Any) -> Optional[float]:
        """Parse a cell into a finite float, or None when it is not numeric"""
        if value is None or isinstance(value, (bool, np.bool_)):
            return None

        if isinstance(value, (int, float, np.integer, np.floating)):
            number = float(value)
            return number if math.isfinite(number) else None

        if not isinstance(value, str):
            return None

        text = value.strip()
        if not text or text.lower() in self.null_tokens:
            return None

        text = self._normalize_separators(text)
        if text is None:
            return None

        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None

    def _normalize_separators(self, text: str) -> Optional[str]:
        has_comma = ',' in text
        has_dot = '.' in text

        if not has_comma:
            return text

        if not self.decimal_comma:
            # commas can only be thousands separators
            return text.replace(',', '') if self.allow_thousands_separator else None

        if has_dot:
            if not self.allow_thousands_separator:
                return None
            last_comma = text.rfind(',')
            last_dot = text.rfind('.')
            if last_dot < last_comma:
                # Brazilian "1.234,56"
                return text.replace('.', '').replace(',', '.')
            # International "1,234.56"
            return text.replace(',', '')

        if text.count(',') > 1:
            return text.replace(',', '') if self.allow_thousands_separator else None

        # "10,5"
        return text.replace(',', '.')

    def is_number(self, value: Any) -> bool:
        return self.parse_number(value) is not None

    def parse_numbers(self, values: Iterable[Any]) -> List[float]:
        """Parse a sequence, dropping cells that are not numeric"""
        parsed = (self.parse_number(v) for v in values)
        return [v for v in parsed if v is not None]


def is_date_value(value: Any) -> bool:
    """True for datetime objects and strings matching a supported date pattern"""
    if isinstance(value, (datetime, date, pd.Timestamp, np.datetime64)):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    return any(pattern.match(text) for pattern in DATE_PATTERNS)


DEFAULT_PARSING_RULE = NumberParsingRule()
