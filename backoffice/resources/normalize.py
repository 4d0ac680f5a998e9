"""
Write-path shaping applied before any record reaches the store.

The remote schema rejects empty arrays, so list columns are always written
with at least one (possibly empty) entry.
"""
import math

EMPTY_LIST = [""]


def normalize_array(value):
    """Coerce a list column value: [] or a falsy scalar -> [""], a scalar -> [scalar]"""
    if isinstance(value, (list, tuple)):
        return list(value) if value else list(EMPTY_LIST)
    if value:
        return [value]
    return list(EMPTY_LIST)


def normalize_container(value, container_type):
    """Replace anything that is not a ``container_type`` with an empty one"""
    if isinstance(value, container_type):
        return value
    return container_type()


def compact(items):
    """Drop blank string entries"""
    return [item for item in (items or []) if isinstance(item, str) and item.strip() != '']


def derive_discount_percentage(price, old_price, current=None):
    """
    Discount shown next to the old price.

    Returns the rounded percentage as a string when old_price > price, an
    empty string when old_price <= price, and ``current`` untouched while
    either price is missing or not positive.
    """
    if not isinstance(old_price, (int, float)) or not isinstance(price, (int, float)):
        return current
    if old_price <= 0 or price <= 0:
        return current
    if old_price > price:
        # round half up, like Math.round
        return str(int(math.floor((old_price - price) / old_price * 100 + 0.5)))
    return ''


def trim_course_syllabus(titles, contents):
    """
    Clean an index-aligned syllabus: blank titles and blank content items are
    dropped, empty content lists removed, and contents truncated so there is
    never more content than titles.
    """
    clean_titles = compact(titles)
    clean_contents = []
    for content in contents or []:
        if not isinstance(content, list):
            continue
        items = compact(content)
        if items:
            clean_contents.append(items)
    return clean_titles, clean_contents[:len(clean_titles)]
