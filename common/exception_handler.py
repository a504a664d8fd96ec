from rest_framework.views import exception_handler as drf_exception_handler

from .errors import WorkflowError


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        # let Django's 500 handling deal with unexpected errors
        return None

    if isinstance(exc, WorkflowError):
        body = {"detail": str(exc.detail), "kind": exc.kind}
        if exc.errors:
            body["errors"] = exc.errors
        if exc.warnings:
            body["warnings"] = exc.warnings
        resp.data = body
        return resp

    # normalize DRF's own errors (serializer validation, auth, 404s)
    if isinstance(resp.data, dict) and set(resp.data.keys()) == {"detail"}:
        resp.data = {"detail": resp.data["detail"], "kind": _kind_for_status(resp.status_code)}
    else:
        resp.data = {"detail": "Invalid input.", "kind": _kind_for_status(resp.status_code), "errors": resp.data}
    return resp


def _kind_for_status(code: int) -> str:
    return {
        400: "validation",
        401: "unauthenticated",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        422: "confirmation_required",
    }.get(code, "error")
