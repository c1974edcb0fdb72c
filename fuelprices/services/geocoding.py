import logging
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor

import requests
from django.conf import settings
from django.db import DatabaseError
from requests.exceptions import RequestException

from fuelprices.models import Station
from fuelprices.utils import join_address

logger = logging.getLogger("fuelprices")

Coordinates = namedtuple('Coordinates', ['lat', 'lng'])


class GoogleGeocodingClient:
    # Google Geocoding API JSON endpoint
    GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key, url=None, timeout=10):
        self.api_key = api_key
        self.url = url or self.GEOCODE_URL
        self.timeout = timeout

    def geocode_address(self, address):
        """
        Geocodes a single address using the Google Geocoding API via requests.

        Failures never propagate: a missing key, a network error, a non-OK
        status, an empty result list or a malformed body all return None.

        Args:
            address: The address string to geocode.

        Returns:
            Coordinates(lat, lng) if geocoding is successful, otherwise None.
        """
        if not self.api_key:
            logger.warning("GOOGLE_GEOCODE_KEY not set; skipping geocoding")
            return None

        params = {
            'address': address,
            'key': self.api_key,
        }

        try:
            response = requests.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (RequestException, ValueError) as e:
            # The exception text can carry the request URL, key included.
            logger.warning("Geocoding request failed for %r: %s", address, type(e).__name__)
            return None

        if not isinstance(data, dict):
            logger.warning("Geocoding returned a malformed body for %r", address)
            return None

        results = data.get('results')
        if data.get('status') != 'OK' or not results:
            logger.warning(
                "Geocoding found no results for %r (status=%s %s)",
                address, data.get('status'), data.get('error_message', ''),
            )
            return None

        try:
            location = results[0]['geometry']['location']
            return Coordinates(float(location['lat']), float(location['lng']))
        except (KeyError, IndexError, TypeError, ValueError):
            logger.warning("Geocoding returned a malformed result for %r", address)
            return None


class StationGeocoder:
    """
    Fills in missing station coordinates and caches them on the station row,
    so each station is looked up at most once.
    """

    def __init__(self, client, max_workers=8):
        self.client = client
        self.max_workers = max(1, max_workers)

    @classmethod
    def from_settings(cls):
        client = GoogleGeocodingClient(
            api_key=settings.GOOGLE_GEOCODE_KEY,
            url=settings.GEOCODE_URL,
            timeout=settings.GEOCODE_TIMEOUT_SECONDS,
        )
        return cls(client, max_workers=settings.GEOCODE_MAX_WORKERS)

    @staticmethod
    def has_coordinates(station):
        return station.get('latitude') is not None and station.get('longitude') is not None

    @staticmethod
    def station_address(station):
        return join_address(station.get('address'), station.get('city'), station.get('state'))

    def needs_lookup(self, station):
        return not self.has_coordinates(station) and self.station_address(station) is not None

    def lookup(self, station):
        """Asks the geocoding client for the station's coordinates, or None."""
        if not self.needs_lookup(station):
            return None
        return self.client.geocode_address(self.station_address(station))

    def save_coordinates(self, station_id, coords):
        """
        Writes coordinates back to the stations table.

        Returns True if the row was updated. A storage failure is logged and
        absorbed; the station will simply be geocoded again next time.
        """
        try:
            Station.objects.filter(pk=station_id).update(latitude=coords.lat, longitude=coords.lng)
        except DatabaseError:
            logger.exception("Failed to save coordinates for station %s", station_id)
            return False
        logger.info("Geocoded station %s -> %s, %s", station_id, coords.lat, coords.lng)
        return True

    def apply(self, station, coords):
        if coords is None:
            return station
        self.save_coordinates(station['id'], coords)
        return {**station, 'latitude': coords.lat, 'longitude': coords.lng}

    def ensure_station_coords(self, station):
        """
        Returns the station with coordinates filled in where they can be found.

        Args:
            station: A station dict with id, address, city, state, latitude
                and longitude keys.

        Returns:
            The same dict when nothing changed, otherwise a copy with
            latitude and longitude set.
        """
        return self.apply(station, self.lookup(station))

    def ensure_coords_for_stations(self, stations):
        """
        Geocodes every station that needs it, looking addresses up concurrently.

        Lookups run on at most max_workers threads; results are written back
        on the calling thread. Input order is preserved.
        """
        stations = list(stations)
        pending = [i for i, station in enumerate(stations) if self.needs_lookup(station)]
        if not pending:
            return stations

        workers = min(self.max_workers, len(pending))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            found = list(executor.map(lambda i: self.lookup(stations[i]), pending))

        for i, coords in zip(pending, found):
            stations[i] = self.apply(stations[i], coords)
        return stations
