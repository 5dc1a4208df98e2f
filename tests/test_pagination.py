import pytest

from app.core.exceptions import ValidationError
from app.repositories.pagination import build_page_info, parse_int_param, resolve_pagination
from app.schemas.common import Pagination


def test_defaults_when_absent():
    pagination = resolve_pagination(None, None, default_limit=10)

    assert pagination.page == 1
    assert pagination.limit == 10
    assert pagination.offset == 0


def test_leading_integer_prefix_is_used():
    assert parse_int_param("3abc", 1, "page") == 3
    assert parse_int_param(" 7", 1, "page") == 7


@pytest.mark.parametrize("value", ["0", "-2", "abc", "+0"])
def test_non_positive_or_non_numeric_is_rejected(value):
    with pytest.raises(ValidationError) as exc_info:
        parse_int_param(value, 1, "page")

    assert exc_info.value.status_code == 400


def test_limit_is_clamped_to_maximum():
    assert resolve_pagination("1", "500", max_limit=100).limit == 100


def test_offset_follows_page_and_limit():
    assert Pagination(page=3, limit=10).offset == 20


@pytest.mark.parametrize(
    "page,limit,total,has_next,total_pages",
    [
        (1, 10, 0, False, 0),
        (1, 10, 10, False, 1),
        (1, 10, 11, True, 2),
        (2, 10, 20, False, 2),
        (3, 10, 25, False, 3),
    ]
)
def test_page_info_maths(page, limit, total, has_next, total_pages):
    info = build_page_info(Pagination(page=page, limit=limit), total)

    assert info.has_next_page is has_next
    assert info.has_next_page is (page * limit < total)
    assert info.total_pages == total_pages
    assert info.total_items == total
    assert info.has_prev_page is (page > 1)
