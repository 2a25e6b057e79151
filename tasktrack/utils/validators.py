from datetime import datetime, timezone, timedelta
from typing import Any, Dict, List, Optional, Tuple
import re

ROLE_MANAGER = 'Manager'
ROLE_EMPLOYEE = 'Employee'
VALID_ROLES = [ROLE_MANAGER, ROLE_EMPLOYEE]

# Firestore auto-generated document ids
_ID_PATTERN = re.compile(r'^[A-Za-z0-9]{20}$')

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# seconds followed by a fraction of any length
_FRACTION_PATTERN = re.compile(r'([T ]\d{2}:\d{2}:\d{2})\.(\d+)')


class Validators:
    """Input validation utilities"""

    @staticmethod
    def validate_id(value: Any) -> bool:
        """Validate a document identifier (Firestore auto id)"""
        return isinstance(value, str) and bool(_ID_PATTERN.match(value))

    @staticmethod
    def validate_id_list(values: Any) -> bool:
        """Validate a list of document identifiers"""
        if not isinstance(values, list):
            return False
        return all(Validators.validate_id(v) for v in values)

    @staticmethod
    def validate_role(role: Any) -> bool:
        return role in VALID_ROLES

    @staticmethod
    def validate_required_string(value: Any) -> bool:
        return isinstance(value, str) and bool(value.strip())


class Helpers:
    """Utility helper functions"""

    @staticmethod
    def now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def parse_date(value: Any) -> Optional[datetime]:
        """Parse a calendar date into an aware UTC datetime.

        Accepts ISO-8601 dates and datetimes (``Z`` or offset suffix, naive
        values are UTC) and numbers of milliseconds since the epoch. Results
        are truncated to whole milliseconds. Returns None when the value
        cannot be parsed.
        """
        if isinstance(value, bool) or value is None:
            return None

        if isinstance(value, (int, float)):
            try:
                parsed = _EPOCH + timedelta(milliseconds=value)
            except (OverflowError, OSError, ValueError):
                return None
            return Helpers._truncate_to_millis(parsed)

        if not isinstance(value, str) or not value.strip():
            return None

        text = value.strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        # older fromisoformat only takes 3 or 6 fraction digits
        text = _FRACTION_PATTERN.sub(lambda m: m.group(1) + '.' + (m.group(2) + '000000')[:6], text)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return Helpers._truncate_to_millis(parsed.astimezone(timezone.utc))

    @staticmethod
    def _truncate_to_millis(value: datetime) -> datetime:
        return value.replace(microsecond=value.microsecond // 1000 * 1000)

    @staticmethod
    def month_bounds(moment: datetime) -> Tuple[datetime, datetime]:
        """First and last millisecond of the UTC calendar month containing ``moment``."""
        moment = moment.astimezone(timezone.utc)
        start = datetime(moment.year, moment.month, 1, tzinfo=timezone.utc)
        if moment.month == 12:
            next_month = datetime(moment.year + 1, 1, 1, tzinfo=timezone.utc)
        else:
            next_month = datetime(moment.year, moment.month + 1, 1, tzinfo=timezone.utc)
        return start, next_month - timedelta(milliseconds=1)

    @staticmethod
    def format_date(value: Any) -> Optional[str]:
        """Format a stored datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``"""
        if not isinstance(value, datetime):
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        return value.strftime('%Y-%m-%dT%H:%M:%S.') + f'{value.microsecond // 1000:03d}Z'

    @staticmethod
    def dedupe(values: List[str]) -> List[str]:
        """Drop repeated ids, keeping first-seen order"""
        return list(dict.fromkeys(values))

    @staticmethod
    def sanitize_string(text: str) -> str:
        if not text:
            return ""
        return text.strip()

    @staticmethod
    def build_error_response(message: str, code: str = "INVALID_ARGUMENT", details: Any = None) -> Dict[str, Any]:
        """Build standardized error response"""
        response = {
            'message': message,
            'error': code,
        }
        if details is not None:
            response['details'] = details
        return response

    @staticmethod
    def build_success_response(data: Any = None, message: str = None) -> Dict[str, Any]:
        """Build standardized success response for account endpoints"""
        return {
            'success': True,
            'message': message,
            'data': data,
        }
