import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

GRADE_ALIASES = {
    'regular': '87',
    '87': '87',
    'unleaded': '87',
    'midgrade': '89',
    '89': '89',
    'premium': '93',
    '93': '93',
    'supreme': '93',
    'diesel': 'diesel',
    'd': 'diesel',
}

MILLS_PER_DOLLAR = Decimal(1000)

# Upper bounds of the price_cents (integer) and id (bigint) columns.
MAX_PRICE_MILLS = 2147483647
MAX_STATION_ID = 2 ** 63 - 1


def canonicalize_grade(label):
    """
    Maps a free-text grade label onto the canonical grade set.

    Known aliases collapse to "87", "89", "93" or "diesel". Anything else is
    returned lowercased and trimmed so custom grades keep their own bucket.
    Canonical labels map to themselves.
    """
    key = label.strip().lower()
    return GRADE_ALIASES.get(key, key)


def is_number(value):
    """True for ints and floats, never for booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def dollars_to_mills(dollars):
    """
    Converts a price in dollars to an integer number of thousandths of a dollar.

    Halves round away from zero on the decimal value the client sent, so
    4.4995 becomes 4500 even though 4.4995 * 1000 is 4499.4999... as a float.

    Args:
        dollars: Price per gallon in dollars (int or float).

    Returns:
        The price in mills, or None if the value is not a finite number.
    """
    if not is_number(dollars) or not math.isfinite(dollars):
        return None
    try:
        mills = (Decimal(str(dollars)) * MILLS_PER_DOLLAR).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
    return int(mills)


def coerce_mills(value):
    """
    Returns value as an integer price in mills if it already is one.

    Integral floats (4499.0) are accepted; fractional mills are not.
    """
    if not is_number(value) or not math.isfinite(value):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        return int(value)
    return value


def resolve_price_mills(price_cents, price):
    """
    Picks the stored price from a mills field and a dollars field.

    The mills field wins whenever it is numeric. Negative prices and prices
    beyond the price column's range are rejected.
    """
    if is_number(price_cents):
        mills = coerce_mills(price_cents)
    else:
        mills = dollars_to_mills(price)
    if mills is None or not 0 <= mills <= MAX_PRICE_MILLS:
        return None
    return mills


def parse_station_id(value):
    """
    Accepts a numeric or numeric-string station id.

    Empty, non-numeric, non-integral or out-of-range values mean "no station".
    """
    if is_number(value):
        if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
            return None
        station_id = int(value)
    elif isinstance(value, str):
        value = value.strip()
        # isdigit() alone also accepts characters such as "²".
        if not (value.isascii() and value.isdigit()):
            return None
        station_id = int(value)
    else:
        return None
    if not 0 <= station_id <= MAX_STATION_ID:
        return None
    return station_id


def first_present(data, *keys):
    """Value of the first key that is present and not None."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def join_address(*parts):
    """
    Joins the non-empty address parts with ", ".

    Returns None when nothing is left to join.
    """
    present = [part.strip() for part in parts if part and part.strip()]
    return ", ".join(present) or None
