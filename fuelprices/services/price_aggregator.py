from collections import defaultdict

from fuelprices.models import PriceSubmission
from fuelprices.utils import canonicalize_grade


def _recency_key(row):
    """
    Sort key for "most recent first" once reversed.

    Unreviewed rows sort as the oldest; creation time breaks ties.
    """
    reviewed_at = row['reviewed_at']
    created_at = row['created_at']
    return (
        reviewed_at is not None,
        reviewed_at if reviewed_at is not None else 0,
        created_at is not None,
        created_at if created_at is not None else 0,
    )


def _is_eligible(row):
    return (
        row.get('status') == PriceSubmission.STATUS_APPROVED
        and row.get('station_id') is not None
        and row.get('grade') is not None
        and row.get('price_cents') is not None
    )


def select_latest_prices(rows):
    """
    Picks the latest approved price per station and canonical grade.

    Args:
        rows: Iterable of submission dicts with station_id, grade, price_cents,
            status, reviewed_at and created_at keys.

    Returns:
        A dict of {station_id: {canonical_grade: price_cents}}.

    Rows are ranked by reviewed_at descending (unreviewed last), then
    created_at descending. When several raw labels share a canonical grade
    ("87" and "Unleaded") the most recent row still wins; rows that tie on
    both timestamps are resolved by raw grade in alphabetical order.
    """
    eligible = [row for row in rows if _is_eligible(row)]
    # Two stable sorts: alphabetical raw grade is the final tie-break.
    eligible.sort(key=lambda row: row['grade'])
    eligible.sort(key=_recency_key, reverse=True)

    prices = defaultdict(dict)
    for row in eligible:
        station_prices = prices[row['station_id']]
        grade = canonicalize_grade(row['grade'])
        if grade not in station_prices:
            station_prices[grade] = int(row['price_cents'])
    return dict(prices)


class PriceAggregator:
    """
    Reads the submission history and builds the current price table per station.
    The table is recomputed on every call; nothing is cached.
    """
    FIELDS = ('station_id', 'grade', 'price_cents', 'status', 'reviewed_at', 'created_at')

    def latest_prices(self):
        rows = (
            PriceSubmission.objects
            .filter(
                status=PriceSubmission.STATUS_APPROVED,
                station__isnull=False,
                grade__isnull=False,
                price_cents__isnull=False,
            )
            .values(*self.FIELDS)
        )
        return select_latest_prices(rows)
