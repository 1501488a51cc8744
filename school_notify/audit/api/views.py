from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from school_notify.audit.api.serializers import AuditLogSerializer
from school_notify.audit.models import AuditLog
from school_notify.users.api.permissions import IsAdminRole

DEFAULT_LIMIT = 5
MAX_LIMIT = 50


class RecentAuditView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    @extend_schema(tags=["Audit"], responses=AuditLogSerializer(many=True))
    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", DEFAULT_LIMIT))
        except (TypeError, ValueError):
            limit = DEFAULT_LIMIT
        limit = max(1, min(limit, MAX_LIMIT))

        rows = list(AuditLog.objects.select_related("actor")[:limit])
        data = AuditLogSerializer(rows, many=True).data
        return Response({"results": data, "limit": limit})
