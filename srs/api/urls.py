from django.urls import path
from .views import CardCreateView, CardDetailView, OwnerCardsView, ReviewView, DueCardsView, StatsView

urlpatterns = [
    path("cards", CardCreateView.as_view(), name="cards"),
    path("cards/<uuid:card_id>", CardDetailView.as_view(), name="card-detail"),
    path("reviews", ReviewView.as_view(), name="review"),
    path("users/<uuid:owner_id>/cards", OwnerCardsView.as_view(), name="owner-cards"),
    path("users/<uuid:owner_id>/due-cards", DueCardsView.as_view(), name="due-cards"),
    path("users/<uuid:owner_id>/stats", StatsView.as_view(), name="stats"),
]
