from django.core.management.base import BaseCommand
from django.db.models import Q

from fuelprices.models import STATION_FIELDS, Station
from fuelprices.services.geocoding import StationGeocoder


class Command(BaseCommand):
    help = 'Geocode stations without coordinates and store the results on the station'

    def add_arguments(self, parser):
        parser.add_argument('--limit', type=int, default=0, help='Max stations to process (0 = all)')

    def handle(self, *args, **kwargs):
        limit = kwargs.get('limit') or 0

        geocoder = StationGeocoder.from_settings()
        if not geocoder.client.api_key:
            self.stdout.write(self.style.WARNING('GOOGLE_GEOCODE_KEY is not set; nothing to do.'))
            return

        stations = list(
            Station.objects
            .filter(Q(latitude__isnull=True) | Q(longitude__isnull=True))
            .order_by('id')
            .values(*STATION_FIELDS)
        )
        if limit > 0:
            stations = stations[:limit]

        self.stdout.write(self.style.SUCCESS(f'Starting geocoding of {len(stations)} station(s)'))

        self.processed_count = 0
        self.geocoded_count = 0
        self.skipped_count = 0

        for station in geocoder.ensure_coords_for_stations(stations):
            self.processed_count += 1
            if geocoder.has_coordinates(station):
                self.geocoded_count += 1
            else:
                self.skipped_count += 1
                self.stdout.write(self.style.WARNING(f'Could not geocode station {station["id"]} ({station["name"]})'))

        self.stdout.write(self.style.SUCCESS('Geocoding finished.'))
        self.stdout.write(self.style.SUCCESS(f'Processed {self.processed_count} station(s).'))
        self.stdout.write(self.style.SUCCESS(f'Geocoded {self.geocoded_count} station(s).'))
        self.stdout.write(self.style.WARNING(f'Skipped {self.skipped_count} station(s).'))
