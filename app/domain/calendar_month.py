"""
CalendarMonth value object — billing granularity of subscriptions.

Textual form: "MM-YYYY" (e.g. "07-2025"). Stored as-is in subscriptions.start_date /
subscriptions.end_date and parsed before any arithmetic.
"""
import re
from dataclasses import dataclass

MIN_YEAR = 1900
MAX_YEAR = 9999

# Integer field: optional "+", ASCII digits only
_INT_FIELD = re.compile(r"\+?[0-9]+", re.ASCII)


class PeriodValidationError(ValueError):
    pass


class InvalidFormatError(PeriodValidationError):
    pass


class InvalidRangeError(PeriodValidationError):
    pass


@dataclass(frozen=True, order=True)
class CalendarMonth:
    """
    Месяц календаря (year, month).

    Поля объявлены в порядке (year, month), поэтому сравнение dataclass'ов
    даёт хронологический порядок.
    """
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise InvalidFormatError(f"month must be between 1 and 12, got {self.month}")
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise InvalidFormatError(
                f"year must be between {MIN_YEAR} and {MAX_YEAR}, got {self.year}"
            )

    def __str__(self) -> str:
        return f"{self.month:02d}-{self.year}"


def parse_month(text: str, field: str = "period") -> CalendarMonth:
    """
    Распарсить строку "MM-YYYY" в CalendarMonth

    Args:
        text: Строка периода ("07-2025", "7-2025")
        field: Имя поля для сообщения об ошибке

    Returns:
        CalendarMonth

    Raises:
        InvalidFormatError: строка не делится на два целых поля или значения вне диапазона
    """
    parts = text.split("-")
    if len(parts) != 2 or not all(_INT_FIELD.fullmatch(p) for p in parts):
        raise InvalidFormatError(f"{field} must be in MM-YYYY format")

    try:
        month, year = int(parts[0]), int(parts[1])
        return CalendarMonth(year=year, month=month)
    except ValueError:
        raise InvalidFormatError(f"{field} must be in MM-YYYY format") from None
