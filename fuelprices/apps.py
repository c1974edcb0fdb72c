from django.apps import AppConfig


class FuelpricesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'fuelprices'
    verbose_name = 'Fuel prices'
