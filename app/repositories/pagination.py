"""
Offset pagination helpers shared by the listing queries
"""

import math
import re
from typing import Optional, Union

from app.core.exceptions import ValidationError
from app.schemas.common import PageInfo, Pagination

# Leading base-10 integer, the rest of the string is ignored ("3abc" -> 3)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int_param(value: Optional[Union[str, int]], default: int, name: str) -> int:
    """
    Parse a positive integer query parameter.

    Args:
        value: Raw query value, None when absent
        default: Value used when the parameter is absent
        name: Parameter name for the error message

    Returns:
        int: Parsed value

    Raises:
        ValidationError: If no integer can be read or it is below 1
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return default
    if isinstance(value, int):
        parsed = value
    else:
        match = _LEADING_INT.match(value)
        if not match:
            raise ValidationError(f"{name} must be a positive integer", errors=[{"field": name, "value": value}])
        parsed = int(match.group(1))

    if parsed < 1:
        raise ValidationError(f"{name} must be a positive integer", errors=[{"field": name, "value": value}])
    return parsed


def resolve_pagination(
    page: Optional[Union[str, int]],
    limit: Optional[Union[str, int]],
    default_limit: int = 10,
    max_limit: int = 100
) -> Pagination:
    """
    Build a Pagination from raw query values.

    Args:
        page: Raw page value (1-based)
        limit: Raw page size
        default_limit: Page size when none is given
        max_limit: Upper bound the page size is clamped to

    Returns:
        Pagination
    """
    page_number = parse_int_param(page, 1, "page")
    limit_number = min(parse_int_param(limit, default_limit, "limit"), max_limit)
    return Pagination(page=page_number, limit=limit_number)


def build_page_info(pagination: Pagination, total_items: int) -> PageInfo:
    """
    Compute page metadata for a total match count.

    Args:
        pagination: Requested page
        total_items: Count of rows matching the listing predicate

    Returns:
        PageInfo
    """
    total_pages = math.ceil(total_items / pagination.limit) if total_items > 0 else 0
    return PageInfo(
        current_page=pagination.page,
        total_pages=total_pages,
        total_items=total_items,
        has_next_page=pagination.page < total_pages,
        has_prev_page=pagination.page > 1
    )
