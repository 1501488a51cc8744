from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from school_notify.media.models import Media
from school_notify.media.services import decode

CACHE_SECONDS = 60 * 60 * 24


class MediaDetailView(APIView):
    """Serve a stored image by id.

    No authentication so the path works directly in ``<img>`` tags.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]

    @extend_schema(tags=["Media"], responses={200: OpenApiTypes.BINARY})
    def get(self, request, pk: int):
        media = get_object_or_404(Media, pk=pk)
        body = decode(media)
        response = HttpResponse(body, content_type=media.mime_type)
        response["Content-Length"] = str(len(body))
        response["Cache-Control"] = f"public, max-age={CACHE_SECONDS}"
        response["ETag"] = f'"media-{media.pk}"'
        return response
