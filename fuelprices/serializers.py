from rest_framework import serializers

from fuelprices.utils import is_number, parse_station_id, resolve_price_mills

STATION_NAME_REQUIRED = "Station name is required."

GRADE_MAX_LENGTH = 50
NAME_MAX_LENGTH = 255
ADDRESS_MAX_LENGTH = 500


def optional_text(max_length=None):
    return serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=max_length)


class NumberField(serializers.Field):
    """
    A JSON number, ints and floats only. Anything else counts as absent.
    """
    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        return data if is_number(data) else None

    def to_representation(self, value):
        return value


class StationIdField(serializers.Field):
    """
    A numeric or numeric-string station id. Anything else means "no station".
    """
    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        return parse_station_id(data)

    def to_representation(self, value):
        return value


class SubmissionContextSerializer(serializers.Serializer):
    """
    Serializer to validate the station context shared by every grade in a price submission.
    Both snake_case and camelCase spellings from older clients are accepted.
    """
    station_id = StationIdField()
    stationId = StationIdField()
    station_name = optional_text(NAME_MAX_LENGTH)
    stationName = optional_text(NAME_MAX_LENGTH)
    station_address = optional_text(ADDRESS_MAX_LENGTH)
    stationAddress = optional_text(ADDRESS_MAX_LENGTH)
    notes = optional_text()
    submitter_name = optional_text(NAME_MAX_LENGTH)
    submitterName = optional_text(NAME_MAX_LENGTH)


class GradeEntrySerializer(serializers.Serializer):
    """
    Serializer to validate one grade/price pair.
    Pass the body-level grade as context['default_grade'] for entries without their own grade.
    """
    grade = optional_text(GRADE_MAX_LENGTH)
    price_cents = NumberField(help_text="Price in thousandths of a dollar, e.g. 4499")
    price = NumberField(help_text="Price in dollars, e.g. 4.499")

    def validate(self, attrs):
        grade = attrs.get('grade') or self.context.get('default_grade')
        if not grade:
            raise serializers.ValidationError("A grade is required.")
        price_cents = resolve_price_mills(attrs.get('price_cents'), attrs.get('price'))
        if price_cents is None:
            raise serializers.ValidationError("A usable price is required.")
        return {'grade': grade, 'price_cents': price_cents}


def optional_grade(value):
    """
    Validates a body-level default grade; unusable values become None.
    """
    try:
        return optional_text(GRADE_MAX_LENGTH).run_validation(value) or None
    except serializers.ValidationError:
        return None


class StationSuggestionSerializer(serializers.Serializer):
    """
    Serializer to validate a suggestion for a station that is not in the directory yet.
    Only the name is required; every other field is trimmed and optional.
    """
    name = serializers.CharField(
        max_length=NAME_MAX_LENGTH,
        error_messages={
            'required': STATION_NAME_REQUIRED,
            'blank': STATION_NAME_REQUIRED,
            'null': STATION_NAME_REQUIRED,
        },
    )
    brand = optional_text()
    # The joined address must fit the 500 character station_address column.
    address = optional_text(255)
    city = optional_text(100)
    state = optional_text(50)
    postal_code = optional_text(20)
    notes = optional_text()
    source = optional_text()
    submitter_name = optional_text(NAME_MAX_LENGTH)
    submitterName = optional_text(NAME_MAX_LENGTH)


class StationSerializer(serializers.Serializer):
    """
    Serializer for a station in the public listing, with its latest approved prices.
    prices_cents maps canonical grade to thousandths of a dollar.
    """
    id = serializers.IntegerField()
    name = serializers.CharField()
    brand = serializers.CharField(allow_null=True)
    address = serializers.CharField(allow_null=True)
    city = serializers.CharField(allow_null=True)
    state = serializers.CharField(allow_null=True)
    latitude = serializers.FloatField(allow_null=True)
    longitude = serializers.FloatField(allow_null=True)
    is_home = serializers.BooleanField()
    prices_cents = serializers.DictField(child=serializers.IntegerField())


def first_error_message(errors):
    """
    Flattens DRF validation errors into the first human readable message.
    """
    if isinstance(errors, dict):
        for value in errors.values():
            return first_error_message(value)
    if isinstance(errors, (list, tuple)) and errors:
        return first_error_message(errors[0])
    return str(errors)
