from django.contrib import admin
from django.urls import include, path

from fuelprices.views import HealthView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health', HealthView.as_view(), name='health'),
    path('api/', include('fuelprices.urls')),
]
