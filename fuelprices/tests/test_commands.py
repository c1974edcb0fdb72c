from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import TestCase, override_settings

from fuelprices.models import Station
from fuelprices.services.geocoding import Coordinates


class GeocodeStationsCommandTests(TestCase):
    """Tests for the geocode_stations backfill command."""

    def setUp(self):
        self.located = Station.objects.create(name='Located', city='Sewickley', state='PA', latitude=1.0, longitude=2.0)
        self.missing = Station.objects.create(name='Missing', address='1 Main St', city='Shields', state='PA')
        self.nowhere = Station.objects.create(name='Nowhere')

    @override_settings(GOOGLE_GEOCODE_KEY='fake_key')
    @patch('fuelprices.services.geocoding.GoogleGeocodingClient.geocode_address')
    def test_backfills_missing_coordinates(self, mock_geocode):
        mock_geocode.return_value = Coordinates(40.52, -80.14)
        out = StringIO()

        call_command('geocode_stations', stdout=out)

        mock_geocode.assert_called_once_with('1 Main St, Shields, PA')
        self.missing.refresh_from_db()
        self.assertEqual((self.missing.latitude, self.missing.longitude), (40.52, -80.14))
        self.assertIn('Processed 2 station(s).', out.getvalue())
        self.assertIn('Geocoded 1 station(s).', out.getvalue())
        self.assertIn('Skipped 1 station(s).', out.getvalue())

    @override_settings(GOOGLE_GEOCODE_KEY='fake_key')
    @patch('fuelprices.services.geocoding.GoogleGeocodingClient.geocode_address')
    def test_limit(self, mock_geocode):
        mock_geocode.return_value = Coordinates(40.52, -80.14)
        out = StringIO()

        call_command('geocode_stations', '--limit', '1', stdout=out)

        self.assertIn('Processed 1 station(s).', out.getvalue())

    @override_settings(GOOGLE_GEOCODE_KEY='')
    @patch('fuelprices.services.geocoding.GoogleGeocodingClient.geocode_address')
    def test_missing_key(self, mock_geocode):
        out = StringIO()

        call_command('geocode_stations', stdout=out)

        mock_geocode.assert_not_called()
        self.assertIn('GOOGLE_GEOCODE_KEY is not set', out.getvalue())
