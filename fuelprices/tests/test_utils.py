import unittest

from fuelprices.utils import (
    MAX_PRICE_MILLS,
    MAX_STATION_ID,
    canonicalize_grade,
    coerce_mills,
    dollars_to_mills,
    join_address,
    parse_station_id,
    resolve_price_mills,
)


class CanonicalizeGradeTests(unittest.TestCase):
    """Tests for mapping free-text grade labels onto canonical grades."""

    def test_known_aliases(self):
        """Test every alias maps to its canonical grade."""
        expected = {
            'regular': '87', '87': '87', 'unleaded': '87',
            'midgrade': '89', '89': '89',
            'premium': '93', '93': '93', 'supreme': '93',
            'diesel': 'diesel', 'd': 'diesel',
        }
        for label, grade in expected.items():
            self.assertEqual(canonicalize_grade(label), grade, label)

    def test_case_and_whitespace_are_ignored(self):
        self.assertEqual(canonicalize_grade('  Unleaded '), '87')
        self.assertEqual(canonicalize_grade('PREMIUM'), '93')
        self.assertEqual(canonicalize_grade(' D'), 'diesel')

    def test_unknown_label_passes_through_lowercased(self):
        """Test custom grades keep their own lowercased bucket."""
        self.assertEqual(canonicalize_grade(' E85 '), 'e85')
        self.assertEqual(canonicalize_grade('Ethanol-Free'), 'ethanol-free')

    def test_empty_label_maps_to_itself(self):
        self.assertEqual(canonicalize_grade(''), '')

    def test_idempotent(self):
        """Test canonicalizing a canonical label returns it unchanged."""
        for label in ['87', '89', '93', 'diesel', 'Regular', 'Supreme', 'E85', 'd']:
            once = canonicalize_grade(label)
            self.assertEqual(canonicalize_grade(once), once, label)


class DollarsToMillsTests(unittest.TestCase):
    """Tests for converting dollar prices to thousandths of a dollar."""

    def test_three_decimal_price(self):
        self.assertEqual(dollars_to_mills(4.499), 4499)

    def test_half_rounds_up(self):
        """Test a half mill rounds up even where float multiplication would land below it."""
        self.assertEqual(dollars_to_mills(4.4995), 4500)
        self.assertEqual(dollars_to_mills(2.0005), 2001)

    def test_whole_dollars(self):
        self.assertEqual(dollars_to_mills(4), 4000)
        self.assertEqual(dollars_to_mills(0), 0)

    def test_rounds_to_nearest(self):
        self.assertEqual(dollars_to_mills(3.1234), 3123)
        self.assertEqual(dollars_to_mills(3.1236), 3124)

    def test_non_numbers_are_rejected(self):
        for value in [None, '4.499', True, float('nan'), float('inf'), [4.499]]:
            self.assertIsNone(dollars_to_mills(value), value)


class ResolvePriceMillsTests(unittest.TestCase):
    """Tests for choosing between the mills field and the dollars field."""

    def test_mills_field_is_taken_verbatim(self):
        self.assertEqual(resolve_price_mills(4799, None), 4799)

    def test_mills_field_wins_over_dollars(self):
        self.assertEqual(resolve_price_mills(4799, 3.999), 4799)

    def test_dollars_used_when_mills_not_numeric(self):
        self.assertEqual(resolve_price_mills('4799', 4.799), 4799)
        self.assertEqual(resolve_price_mills(None, 3.459), 3459)

    def test_fractional_mills_rejected(self):
        self.assertIsNone(resolve_price_mills(4799.5, None))
        self.assertEqual(coerce_mills(4799.0), 4799)

    def test_negative_price_rejected(self):
        self.assertIsNone(resolve_price_mills(-1, None))
        self.assertIsNone(resolve_price_mills(None, -4.5))

    def test_missing_price(self):
        self.assertIsNone(resolve_price_mills(None, None))

    def test_prices_beyond_column_range_rejected(self):
        """Test prices that do not fit the integer price column are unusable."""
        self.assertEqual(resolve_price_mills(MAX_PRICE_MILLS, None), MAX_PRICE_MILLS)
        self.assertIsNone(resolve_price_mills(MAX_PRICE_MILLS + 1, None))
        self.assertIsNone(resolve_price_mills(10 ** 20, None))
        self.assertIsNone(resolve_price_mills(None, 1e300))


class ParseStationIdTests(unittest.TestCase):
    """Tests for station identifier parsing."""

    def test_numbers_and_numeric_strings(self):
        self.assertEqual(parse_station_id(12), 12)
        self.assertEqual(parse_station_id('12'), 12)
        self.assertEqual(parse_station_id(' 7 '), 7)
        self.assertEqual(parse_station_id(3.0), 3)

    def test_no_station(self):
        for value in [None, '', '   ', 'abc', '12a', 1.5, True, -4, {}]:
            self.assertIsNone(parse_station_id(value), value)

    def test_non_ascii_digits_mean_no_station(self):
        """Test only ASCII digit strings count as station ids."""
        for value in ['²', '1²', '١٢', '①']:
            self.assertIsNone(parse_station_id(value), value)

    def test_ids_beyond_bigint_range_mean_no_station(self):
        self.assertEqual(parse_station_id(str(MAX_STATION_ID)), MAX_STATION_ID)
        self.assertIsNone(parse_station_id('9' * 30))
        self.assertIsNone(parse_station_id(MAX_STATION_ID + 1))
        self.assertIsNone(parse_station_id(1e300))


class TextHelpersTests(unittest.TestCase):

    def test_join_address_skips_missing_parts(self):
        self.assertEqual(join_address('1 Main St', 'Shields', 'PA'), '1 Main St, Shields, PA')
        self.assertEqual(join_address(None, 'Shields', ' '), 'Shields')
        self.assertIsNone(join_address(None, '', None))
