from django.urls import path

from .views import MediaDetailView

urlpatterns = [
    path("<int:pk>/", MediaDetailView.as_view(), name="media-detail"),
]
