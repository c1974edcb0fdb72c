from dataclasses import dataclass
from typing import List, Optional, Tuple

from rest_framework.exceptions import ValidationError

from fuelprices.serializers import (
    GradeEntrySerializer,
    StationSuggestionSerializer,
    SubmissionContextSerializer,
    first_error_message,
    optional_grade,
)
from fuelprices.utils import first_present, join_address


class InvalidSubmission(ValueError):
    """Raised when a request body cannot produce any submission row."""


@dataclass(frozen=True)
class StationContext:
    station_id: Optional[int]
    station_name: Optional[str]
    station_address: Optional[str]
    notes: Optional[str]
    submitter_name: Optional[str]


@dataclass(frozen=True)
class GradeEntry:
    grade: str
    price_cents: int


@dataclass(frozen=True)
class MultiGradePayload:
    """Body carrying a submissions[] array; entries holds the usable ones."""
    context: StationContext
    entries: Tuple[GradeEntry, ...]
    default_grade: Optional[str] = None


@dataclass(frozen=True)
class LegacyPayload:
    """Older single-grade body; entry is None when grade or price is unusable."""
    context: StationContext
    entry: Optional[GradeEntry]


@dataclass(frozen=True)
class NormalizedSubmission:
    station_id: Optional[int]
    station_name: Optional[str]
    station_address: Optional[str]
    grade: str
    price_cents: int
    notes: Optional[str]
    submitter_name: Optional[str]


@dataclass(frozen=True)
class StationSuggestion:
    station_name: str
    station_address: Optional[str]
    notes: Optional[str]
    submitter_name: Optional[str]


NO_VALID_SUBMISSIONS = (
    "No valid grade/price submissions found. Provide either { grade, price } "
    "or submissions[{ grade, price_cents|price }]."
)


def _validate(serializer):
    try:
        serializer.is_valid(raise_exception=True)
    except ValidationError as e:
        raise InvalidSubmission(first_error_message(e.detail))
    return serializer.validated_data


def _grade_entry(data, default_grade=None):
    """A GradeEntry for one grade/price pair, or None if it is unusable."""
    serializer = GradeEntrySerializer(data=data, context={'default_grade': default_grade})
    if not serializer.is_valid():
        return None
    return GradeEntry(**serializer.validated_data)


def _station_context(data):
    validated = _validate(SubmissionContextSerializer(data=data))
    return StationContext(
        station_id=first_present(validated, 'station_id', 'stationId'),
        station_name=first_present(validated, 'station_name', 'stationName') or None,
        station_address=first_present(validated, 'station_address', 'stationAddress') or None,
        notes=validated.get('notes') or None,
        submitter_name=first_present(validated, 'submitter_name', 'submitterName') or None,
    )


def parse_submission_payload(data):
    """
    Validates a price submission body and tags it with its shape.

    Args:
        data: The decoded JSON request body.

    Returns:
        A MultiGradePayload when the body has a non-empty submissions list,
        otherwise a LegacyPayload. Grade entries without a usable grade or
        price are left out.

    Raises:
        InvalidSubmission: If the body is not a JSON object or a station
            field is malformed or too long.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidSubmission("Request body must be a JSON object.")

    context = _station_context(data)

    submissions = data.get('submissions')
    if isinstance(submissions, list) and submissions:
        default_grade = optional_grade(data.get('grade'))
        entries = tuple(
            entry for entry in (
                _grade_entry(item, default_grade) for item in submissions if isinstance(item, dict)
            )
            if entry is not None
        )
        return MultiGradePayload(context=context, entries=entries, default_grade=default_grade)

    return LegacyPayload(context=context, entry=_grade_entry(data))


def _entries(payload):
    if isinstance(payload, MultiGradePayload):
        return payload.entries
    if isinstance(payload, LegacyPayload):
        return (payload.entry,) if payload.entry is not None else ()
    raise TypeError(f"Unsupported submission payload: {type(payload).__name__}")


def normalize_submission(payload) -> List[NormalizedSubmission]:
    """
    Turns a parsed payload into the rows to store.

    An empty result means the client sent nothing usable.
    """
    context = payload.context
    return [
        NormalizedSubmission(
            station_id=context.station_id,
            station_name=context.station_name,
            station_address=context.station_address,
            grade=entry.grade,
            price_cents=entry.price_cents,
            notes=context.notes,
            submitter_name=context.submitter_name,
        )
        for entry in _entries(payload)
    ]


def normalize_submission_body(data) -> List[NormalizedSubmission]:
    """
    Parses and normalizes a raw request body in one step.

    Raises:
        InvalidSubmission: If the body is malformed or yields no rows.
    """
    rows = normalize_submission(parse_submission_payload(data))
    if not rows:
        raise InvalidSubmission(NO_VALID_SUBMISSIONS)
    return rows


def build_station_suggestion(data) -> StationSuggestion:
    """
    Validates a new-station suggestion and flattens it into submission fields.

    Address parts are joined with ", ". Brand and source are appended to the
    notes as "Brand: ..." and "Source: ...", joined with " | ".

    Raises:
        InvalidSubmission: If the station name is missing or a field is malformed.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidSubmission("Request body must be a JSON object.")

    validated = _validate(StationSuggestionSerializer(data=data))

    station_address = join_address(
        validated.get('address'),
        validated.get('city'),
        validated.get('state'),
        validated.get('postal_code'),
    )

    note_parts = []
    if validated.get('notes'):
        note_parts.append(validated['notes'])
    if validated.get('brand'):
        note_parts.append(f"Brand: {validated['brand']}")
    if validated.get('source'):
        note_parts.append(f"Source: {validated['source']}")

    return StationSuggestion(
        station_name=validated['name'],
        station_address=station_address,
        notes=" | ".join(note_parts) or None,
        submitter_name=first_present(validated, 'submitter_name', 'submitterName') or None,
    )
