# app/pagination.py
from typing import Sequence, List

DEFAULT_PAGE_SIZE = 10


def paginate(items: Sequence, page: int, size: int) -> List:
    """Return the 1-based `page` of `items` holding at most `size` entries.

    Pages past the end are empty. `page` and `size` must be positive.
    """
    if page < 1 or size < 1:
        raise ValueError("page and size must be positive integers")
    start = (page - 1) * size
    return list(items[start:start + size])
