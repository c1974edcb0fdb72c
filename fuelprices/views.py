import logging

from django.db import DatabaseError
from django.db.models.functions import Lower
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from fuelprices.models import STATION_FIELDS, PriceSubmission, Station
from fuelprices.serializers import StationSerializer
from fuelprices.services.geocoding import StationGeocoder
from fuelprices.services.price_aggregator import PriceAggregator
from fuelprices.services.price_normalizer import (
    InvalidSubmission,
    build_station_suggestion,
    normalize_submission_body,
)

logger = logging.getLogger("fuelprices")


def client_ip(request):
    return request.META.get('REMOTE_ADDR') or None


class HealthView(APIView):
    def get(self, request):
        return Response({'status': 'ok'})


class StationListView(APIView):
    """
    API View listing all stations with their latest approved prices per grade.
    Prices are exposed in `prices_cents` as thousandths of a dollar.
    Stations without coordinates are geocoded and the result is cached on the station.
    """
    def get(self, request):
        try:
            stations = list(
                Station.objects
                .order_by('-is_home', Lower('name'), 'id')
                .values(*STATION_FIELDS)
            )
            prices = PriceAggregator().latest_prices()
        except DatabaseError:
            logger.exception("Error in GET /api/stations")
            return Response({'error': 'Failed to load stations'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        for station in stations:
            station['prices_cents'] = prices.get(station['id'], {})

        stations = StationGeocoder.from_settings().ensure_coords_for_stations(stations)

        return Response(StationSerializer(stations, many=True).data, status=status.HTTP_200_OK)


class PriceSubmissionView(APIView):
    """
    API View accepting community price updates.
    Takes either a single { grade, price } body or a submissions[] array of grades.
    """
    def post(self, request):
        try:
            rows = normalize_submission_body(request.data)
        except InvalidSubmission as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        ip = client_ip(request)
        try:
            station_ids = {row.station_id for row in rows if row.station_id is not None}
            known = set(Station.objects.filter(pk__in=station_ids).values_list('pk', flat=True))
            if station_ids - known:
                return Response({'error': 'Unknown station.'}, status=status.HTTP_400_BAD_REQUEST)

            ids = []
            for row in rows:
                submission = PriceSubmission.objects.create(
                    station_id=row.station_id,
                    station_name=row.station_name,
                    station_address=row.station_address,
                    grade=row.grade,
                    price_cents=row.price_cents,
                    notes=row.notes,
                    submitter_name=row.submitter_name,
                    submitter_ip=ip,
                )
                ids.append(submission.id)
        except DatabaseError:
            logger.exception("Error in POST /api/price-submissions")
            return Response({'error': 'Failed to submit price'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        # A single row keeps the older { id } response shape.
        if len(ids) == 1:
            return Response({'id': ids[0]}, status=status.HTTP_201_CREATED)
        return Response({'ids': ids}, status=status.HTTP_201_CREATED)


class NewStationSuggestionView(APIView):
    """
    API View recording a suggested station that is not in the directory yet.
    Stored as a submission without station, grade or price for admins to review.
    """
    def post(self, request):
        try:
            suggestion = build_station_suggestion(request.data)
        except InvalidSubmission as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            submission = PriceSubmission.objects.create(
                station=None,
                station_name=suggestion.station_name,
                station_address=suggestion.station_address,
                grade=None,
                price_cents=None,
                notes=suggestion.notes,
                submitter_name=suggestion.submitter_name,
                submitter_ip=client_ip(request),
            )
        except DatabaseError:
            logger.exception("Error in POST /api/price-submissions/new-station")
            return Response(
                {'error': 'Failed to submit station suggestion'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({'id': submission.id}, status=status.HTTP_201_CREATED)
