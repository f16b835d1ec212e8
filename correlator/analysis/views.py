import logging

from django.core.files.uploadedfile import UploadedFile
from django.http import HttpResponse, JsonResponse
from rest_framework.request import Request
from rest_framework.views import APIView

from analysis.lib.correlations import load_dataset, run_analysis
from analysis.serializers import AnalyzeRequestSerializer, UploadSerializer
from core.exceptions import (
    ExternalServiceError,
    InsufficientDataError,
    ParseError,
    UndefinedCorrelationError,
)
from core.parsing import parse_file

logger = logging.getLogger(__name__)

KNOWN_CONTENT_TYPES = ("text/csv", "application/json")


def get_format_hint(upload: UploadedFile) -> str:
    content_type = (upload.content_type or "").split(";")[0].strip()
    if content_type in KNOWN_CONTENT_TYPES:
        return content_type
    return upload.name or ""


def error_response(message: str, status: int = 400) -> JsonResponse:
    return JsonResponse({"error": message}, status=status)


class ColumnsView(APIView):
    def post(self, request: Request) -> HttpResponse:
        serializer = UploadSerializer(data=request.data)
        if not serializer.is_valid():
            return JsonResponse({"error": serializer.errors}, status=400)

        upload = serializer.validated_data["file"]
        try:
            records = parse_file(upload.read(), get_format_hint(upload))
        except ParseError as e:
            return error_response(str(e))

        if len(records) == 0:
            return error_response("File is empty or could not be parsed.")

        return JsonResponse(
            {
                "name": upload.name,
                "columns": list(records[0].keys()),
                "record_count": len(records),
            }
        )


class AnalyzeView(APIView):
    def post(self, request: Request) -> HttpResponse:
        serializer = AnalyzeRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return JsonResponse({"error": serializer.errors}, status=400)

        data = serializer.validated_data
        file1 = data["file1"]
        file2 = data["file2"]

        try:
            dataset1 = load_dataset(
                data.get("name1") or file1.name,
                file1.read(),
                get_format_hint(file1),
                data["time_field1"],
                data["value_field1"],
            )
            dataset2 = load_dataset(
                data.get("name2") or file2.name,
                file2.read(),
                get_format_hint(file2),
                data["time_field2"],
                data["value_field2"],
            )
            result = run_analysis(dataset1, dataset2)
        except (ParseError, InsufficientDataError, UndefinedCorrelationError) as e:
            logger.info("Rejected analysis request: %s", e)
            return error_response(str(e))
        except ExternalServiceError as e:
            return error_response(str(e), status=502)

        return JsonResponse(result.model_dump(mode="json"))
