import math

DEFAULT_PAGE_SIZE = 25


def sort_rows(rows, key):
    """Stable, case-insensitive sort on a text field of each row."""
    return sorted(rows, key=lambda row: str(row.get(key) or "").casefold())


def _positive_int(value, default):
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        return default


def parse_pagination(args, default_limit=DEFAULT_PAGE_SIZE):
    page = _positive_int(args.get("page"), 1)
    limit = _positive_int(args.get("limit"), default_limit)
    return page, limit


def pagination_info(total, page, limit):
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": max(math.ceil(total / limit), 1),
    }


def paginate(items, page, limit):
    items = list(items)
    start = (page - 1) * limit
    return items[start:start + limit], pagination_info(len(items), page, limit)


def average(values, digits=2):
    values = list(values)
    if not values:
        return 0
    return round(sum(values) / len(values), digits)
