"""Monthly time axis: bucket generation, month arithmetic and labels."""

from datetime import datetime, timedelta

MONTH_NAMES = {
    "es": [
        "enero", "febrero", "marzo", "abril", "mayo", "junio",
        "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
    ],
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}


def month_start(instant: datetime) -> datetime:
    return instant.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def add_months(instant: datetime, months: int) -> datetime:
    """Step a month start by whole calendar months."""
    total = instant.year * 12 + (instant.month - 1) + months
    return month_start(instant).replace(year=total // 12, month=total % 12 + 1)


def month_span(start: datetime, end: datetime) -> int:
    """Number of calendar months from start's month to end's month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def bucket_cutoff(bucket: datetime) -> datetime:
    """Last instant covered by a bucket: anything dated in its month belongs to it."""
    return add_months(bucket, 1) - timedelta(microseconds=1)


def build_monthly_buckets(min_instant: datetime, max_instant: datetime) -> list[datetime]:
    """One bucket per calendar month from min's month through max's month, inclusive.

    A max earlier than min is clamped up to min, so the result always has at
    least one element.
    """
    if max_instant < min_instant:
        max_instant = min_instant

    first = month_start(min_instant)
    return [add_months(first, i) for i in range(month_span(first, max_instant) + 1)]


def bucket_label(bucket: datetime, locale: str = "es") -> str:
    """Long month + year, capitalized: ``Junio de 2017`` / ``June 2017``."""
    name = MONTH_NAMES[locale][bucket.month - 1]
    if locale == "es":
        text = f"{name} de {bucket.year}"
    else:
        text = f"{name} {bucket.year}"
    return text[0].upper() + text[1:]


def short_label(bucket: datetime) -> str:
    return bucket.strftime("%d/%m/%Y")
