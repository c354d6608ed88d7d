import logging

from django.core.cache import cache
from django.db import connection, DatabaseError
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def healthz(_request):
    return Response({"ok": True})


class DeepHealthView(APIView):
    """
    GET /api/v1/core/deep-health?db=1&cache=1
    Return component statuses. All checks optional; 503 when one fails.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        out = {"ok": True, "time": timezone.now().isoformat()}

        if request.query_params.get("db") == "1":
            try:
                with connection.cursor() as cur:
                    cur.execute("SELECT 1")
                    cur.fetchone()
                out["db"] = {"ok": True}
            except DatabaseError as e:
                logger.exception("Database health check failed")
                out["ok"] = False
                out["db"] = {"ok": False, "error": str(e)}

        if request.query_params.get("cache") == "1":
            cache.set("core_healthz_probe", "1", timeout=10)
            ok = cache.get("core_healthz_probe") == "1"
            out["cache"] = {"ok": ok}
            out["ok"] = out["ok"] and ok

        return Response(out, status=200 if out["ok"] else 503)
