from datetime import datetime
from typing import Optional

DATE_FORMATS = ("%Y-%m-%d", "%Y-%m")


def parse_date(value: str) -> Optional[datetime]:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    return None


def format_month(value: str) -> str:
    parsed = parse_date(value)
    # Unparseable dates are shown verbatim
    return parsed.strftime("%b %Y") if parsed else value.strip()


def format_duration(start_date: str, end_date: Optional[str] = None) -> str:
    """Display string for an experience, e.g. ``"Jan 2023 - Present"``."""
    start = format_month(start_date)
    end = format_month(end_date) if end_date and end_date.strip() else "Present"
    return f"{start} - {end}"
