import logging
import secrets

from django.conf import settings
from django.utils.dateparse import parse_datetime
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from rest_framework import permissions, serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from payment.tasks import RENT_CYCLE_JOB, run_rent_cycle
from .models import JobExecutionLog
from .services import job_stats

logger = logging.getLogger(__name__)


# ----- Serializers (kept local to the views) -----
class RentCycleTriggerSerializer(serializers.Serializer):
    run_date = serializers.DateField(required=False, allow_null=True)
    force = serializers.BooleanField(required=False, default=False)
    dry_run = serializers.BooleanField(required=False, default=False)


class JobExecutionLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = JobExecutionLog
        fields = [
            "id",
            "job_name",
            "job_id",
            "status",
            "success",
            "started_at",
            "finished_at",
            "duration_ms",
            "retry_count",
            "max_retries",
            "error_message",
            "input",
            "output",
            "queue",
        ]
        read_only_fields = fields


# ----- Token check -----
def _bearer_token(request) -> str:
    scheme, _, token = request.META.get("HTTP_AUTHORIZATION", "").partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def _truthy(value) -> bool:
    return str(value).lower() in {"1", "true", "yes"}


# ----- Views -----
@extend_schema(
    request=RentCycleTriggerSerializer,
    responses={
        200: OpenApiResponse(description="Dry run acknowledged; nothing queued", response=dict),
        202: OpenApiResponse(description="Rent cycle queued", response=dict),
        401: OpenApiResponse(description="Missing or invalid bearer token"),
        503: OpenApiResponse(description="Trigger token not configured"),
    },
)
class RentCycleTriggerView(APIView):
    """Queue the rent cycle from an external scheduler using a shared bearer token."""

    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        expected = getattr(settings, "JOB_TRIGGER_API_TOKEN", "") or ""
        if not expected:
            logger.error("Rent cycle trigger called but JOB_TRIGGER_API_TOKEN is not configured")
            return Response({"detail": "Job trigger is not configured"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        token = _bearer_token(request)
        if not token or not secrets.compare_digest(token, expected):
            logger.warning("Rejected rent cycle trigger from %s", request.META.get("REMOTE_ADDR"))
            return Response({"detail": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)

        serializer = RentCycleTriggerSerializer(data=request.data or {})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        run_date = data.get("run_date")
        params = {
            "run_date": run_date.isoformat() if run_date else None,
            "force": data["force"],
            "dry_run": data["dry_run"],
        }

        if data["dry_run"]:
            return Response({"queued": False, "dry_run": True, "message": "Dry run: job not queued", "params": params})

        result = run_rent_cycle.delay(**params)
        logger.info("Rent cycle queued via API: task=%s params=%s", result.id, params)
        return Response(
            {"queued": True, "task_id": result.id, "job_name": RENT_CYCLE_JOB, "params": params},
            status=status.HTTP_202_ACCEPTED,
        )


@extend_schema(
    parameters=[
        OpenApiParameter(name="job_name", type=str, description="Exact job name."),
        OpenApiParameter(name="status", type=str, description="running | completed | failed | cancelled"),
        OpenApiParameter(name="success", type=str, description="Filter by success (true/false)."),
        OpenApiParameter(name="page", type=int, description="Page number (default 1)."),
        OpenApiParameter(name="page_size", type=int, description="Items per page (max 100, default 20)."),
    ],
    responses={200: OpenApiResponse(response=JobExecutionLogSerializer, description="Paginated job execution logs")},
)
class JobExecutionLogListView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        params = request.query_params
        qs = JobExecutionLog.objects.all()
        if params.get("job_name"):
            qs = qs.filter(job_name=params["job_name"])
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("success") not in (None, ""):
            qs = qs.filter(success=_truthy(params["success"]))
        qs = qs.order_by("-started_at", "-id")
        try:
            page = max(int(params.get("page", 1)), 1)
            page_size = max(min(int(params.get("page_size", 20)), 100), 1)
        except (TypeError, ValueError):
            return Response({"detail": "page and page_size must be integers"}, status=status.HTTP_400_BAD_REQUEST)
        start = (page - 1) * page_size
        end = start + page_size
        serializer = JobExecutionLogSerializer(qs[start:end], many=True)
        return Response({
            "count": qs.count(),
            "results": serializer.data,
        })


@extend_schema(
    parameters=[
        OpenApiParameter(name="job_name", type=str),
        OpenApiParameter(name="start", type=str, description="ISO datetime lower bound on started_at."),
        OpenApiParameter(name="end", type=str, description="ISO datetime upper bound on started_at."),
    ],
    responses={200: OpenApiResponse(description="Aggregated job execution statistics", response=dict)},
)
class JobStatsView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        params = request.query_params
        bounds = {}
        for key in ("start", "end"):
            raw = params.get(key)
            if raw:
                parsed = parse_datetime(raw)
                if parsed is None:
                    return Response({"detail": f"Invalid {key} datetime"}, status=status.HTTP_400_BAD_REQUEST)
                bounds[key] = parsed
        return Response(job_stats(job_name=params.get("job_name") or None, **bounds))
