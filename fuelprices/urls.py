from django.urls import path

from .views import NewStationSuggestionView, PriceSubmissionView, StationListView

urlpatterns = [
    path('stations/', StationListView.as_view(), name='station-list'),
    path('price-submissions/', PriceSubmissionView.as_view(), name='price-submission'),
    path('price-submissions/new-station/', NewStationSuggestionView.as_view(), name='new-station-suggestion'),
]
