"""Duplicate-title disambiguation.

When a user saves a snippet whose title already exists in the same folder,
the new snippet keeps the entered title as ``original_title`` and gets a
timestamp suffix instead of overwriting the existing one.
"""

from datetime import datetime, timezone

SUFFIX_FORMAT = "%Y-%m-%dT%H-%M-%S"


def format_title_suffix(moment: datetime) -> str:
    """Format ``moment`` (converted to UTC) for use in a title.

    Examples:
        >>> format_title_suffix(datetime(2024, 1, 1, tzinfo=timezone.utc))
        '2024-01-01T00-00-00'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(SUFFIX_FORMAT)


def disambiguate_title(
    title: str, moment: datetime, attempt: int = 1, max_length: int | None = None
) -> str:
    """Build a candidate title for the ``attempt``-th collision.

    The first attempt appends the timestamp only; later attempts add a
    counter so that several saves within the same second stay distinct.
    The base title is shortened when the result would exceed ``max_length``.

    Examples:
        >>> moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> disambiguate_title("scratch", moment)
        'scratch (2024-01-01T00-00-00)'
        >>> disambiguate_title("scratch", moment, attempt=3)
        'scratch (2024-01-01T00-00-00 #3)'
    """
    stamp = format_title_suffix(moment)
    suffix = f" ({stamp})" if attempt <= 1 else f" ({stamp} #{attempt})"
    base = title
    if max_length is not None and len(base) + len(suffix) > max_length:
        base = base[: max(max_length - len(suffix), 1)].rstrip()
    return f"{base}{suffix}"
