from django.db import models

# Station columns exposed by the listing and the geocoding backfill.
STATION_FIELDS = ('id', 'name', 'brand', 'address', 'city', 'state', 'latitude', 'longitude', 'is_home')


class Station(models.Model):
    name = models.CharField(max_length=255)
    brand = models.CharField(max_length=100, null=True, blank=True)
    address = models.CharField(max_length=255, null=True, blank=True)
    city = models.CharField(max_length=100, null=True, blank=True)
    state = models.CharField(max_length=50, null=True, blank=True)

    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    # Sorted first in listings and used as the reference point for distances.
    is_home = models.BooleanField(default=False)

    class Meta:
        db_table = 'stations'

    def __str__(self):
        return f"{self.name} - {self.city}, {self.state}"


class PriceSubmission(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    # Null station means the row is a new-station suggestion.
    station = models.ForeignKey(
        Station, null=True, blank=True, on_delete=models.SET_NULL, related_name='price_submissions'
    )
    station_name = models.CharField(max_length=255, null=True, blank=True)
    station_address = models.CharField(max_length=500, null=True, blank=True)

    # Free text; canonicalized when prices are read, not when written.
    grade = models.CharField(max_length=50, null=True, blank=True)
    # Thousandths of a dollar: 4499 is $4.499.
    price_cents = models.PositiveIntegerField(null=True, blank=True)

    notes = models.TextField(null=True, blank=True)
    submitter_name = models.CharField(max_length=255, null=True, blank=True)
    submitter_ip = models.GenericIPAddressField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'price_submissions'

    def __str__(self):
        target = self.station.name if self.station_id else self.station_name
        return f"{target} {self.grade or '-'} @ {self.price_cents} ({self.status})"
