# resume_optimizer/optimizer/dates.py
import re
import logging
from datetime import datetime
from typing import Optional

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


PRESENT_WORDS = {'present', 'current', 'currently', 'now', 'ongoing', 'till date', 'to date', 'today'}
EXPECTED_PATTERN = re.compile(r'\b(?:expected|anticipated|pursuing)\b', re.IGNORECASE)
RANGE_SPLIT = re.compile(r'\s*(?:–|—|-|\bto\b|\buntil\b)\s*', re.IGNORECASE)
CANONICAL_RANGE = re.compile(r'^[A-Z][a-z]{2} \d{4} - (?:[A-Z][a-z]{2} \d{4}|Present)$')
YEAR_ONLY = re.compile(r'^\d{4}$')

# Day/month used when a part only carries a year
_DEFAULT_DATE = datetime(2000, 1, 1)


class DateNormalizer:
    """Rewrite free-form date ranges as 'Mon YYYY - Mon YYYY' or '... - Present'"""

    def normalize_range(self, value: Optional[str]) -> str:
        """
        Normalize a date range

        Args:
            value: Date range as written, e.g. '2020 - 2022', '03/2021 to now'

        Returns:
            Normalized range, or the input unchanged when it cannot be parsed
        """
        if not value or not value.strip():
            return ""

        text = " ".join(value.split())
        if CANONICAL_RANGE.match(text) or EXPECTED_PATTERN.search(text):
            return text

        # Keep numeric dates like 2020-05 intact before splitting on hyphens
        parts = [p for p in RANGE_SPLIT.split(text) if p] if not re.fullmatch(r'\d{4}-\d{2}', text) else [text]
        if len(parts) == 1:
            return self._normalize_single(parts[0]) or text
        if len(parts) != 2:
            return text

        start = self._normalize_part(parts[0], is_end=False)
        end = self._normalize_part(parts[1], is_end=True)
        if not start or not end:
            logger.debug(f"Could not normalize date range '{value}'")
            return text
        return f"{start} - {end}"

    def _normalize_single(self, part: str) -> Optional[str]:
        if YEAR_ONLY.match(part):
            return part
        return self._parse_month_year(part)

    def _normalize_part(self, part: str, is_end: bool) -> Optional[str]:
        lower = part.strip().lower()
        if lower in PRESENT_WORDS:
            return "Present"
        if YEAR_ONLY.match(lower):
            return f"Dec {lower}" if is_end else f"Jan {lower}"
        return self._parse_month_year(part)

    def _parse_month_year(self, part: str) -> Optional[str]:
        if not re.search(r'\d{2,4}', part):
            return None
        try:
            parsed = dateutil_parser.parse(part, default=_DEFAULT_DATE, fuzzy=True)
        except (ValueError, OverflowError, TypeError) as e:
            logger.debug(f"Failed to parse date '{part}': {e}")
            return None
        return parsed.strftime('%b %Y')


def normalize_date_range(value: Optional[str]) -> str:
    return DateNormalizer().normalize_range(value)
