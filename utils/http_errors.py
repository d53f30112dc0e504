"""JSON error bodies for the API routes."""

from fastapi.responses import JSONResponse

from services.errors import ErrorReport


def error_response(report: ErrorReport) -> JSONResponse:
    """Return `{"error": ...}` with the status code of the report's category."""
    return JSONResponse({"error": report.human_message}, status_code=report.status_code)
