"""Success envelope shared by every endpoint: ``{"data": ..., "errors": []}``.

Errors use the same outer shape plus a ``kind`` field; see
``core.exceptions.custom_exception_handler``.
"""

from typing import Any

from rest_framework.response import Response
from rest_framework.views import APIView


def api_response(data: Any, status: int = 200) -> Response:
    return Response({"data": data, "errors": []}, status=status)


def message_response(message: str, status: int = 200) -> Response:
    """Envelope for endpoints whose only result is a confirmation message."""
    return api_response({"message": message}, status=status)


class BaseAPIView(APIView):
    """APIView whose successful bodies are always enveloped.

    Views normally build their responses with :func:`api_response`; anything
    produced elsewhere (e.g. DRF's OPTIONS metadata) is wrapped here.
    """

    def finalize_response(self, request, response, *args, **kwargs):
        body = getattr(response, "data", None)
        already_wrapped = isinstance(body, dict) and {"data", "errors"} <= body.keys()
        if body is not None and response.status_code < 400 and not already_wrapped:
            response.data = {"data": body, "errors": []}
        return super().finalize_response(request, response, *args, **kwargs)
