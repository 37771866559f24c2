# ==============================================
# CompletedExchange
# ==============================================
#
# PURPOSE:
#   Normalizes one finished Blob Service HTTP exchange, whichever HTTP
#   stack produced it, into the handful of facts discovery needs:
#     - request method and full URL
#     - request headers and request body length
#     - response status code, response content length and the total
#       length from Content-Range (ranged reads)
#
# WHY THIS CLASS EXISTS:
#   Requests reach us from two places:
#     1. a `requests.Session` response hook
#     2. the Azure SDK's `raw_response_hook` (an azure.core PipelineResponse)
#   Both expose the same information with different shapes. Everything
#   downstream (router, size hints) works on CompletedExchange only.
#
# CLASS: CompletedExchange
# ------------------------
#   - from_requests_response(response) -> CompletedExchange   (classmethod)
#   - from_pipeline_response(pipeline_response) -> CompletedExchange
#   - is_successful -> bool       (2xx only are eligible for discovery)
#   - header(name) -> str | None  (case-insensitive request header lookup)
#
# ==============================================

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional

from requests.structures import CaseInsensitiveDict

if TYPE_CHECKING:
    import requests


def parse_content_length(value: Any) -> Optional[int]:
    """
    Read a Content-Length style header value.

    Returns:
        The integer value, or None when missing or unparseable
    """
    if value is None:
        return None
    try:
        length = int(str(value).strip())
    except ValueError:
        return None
    return length if length >= 0 else None


_CONTENT_RANGE = re.compile(r"^\s*bytes\s+(?:\d+-\d+|\*)/(\d+)\s*$", re.IGNORECASE)


def parse_content_range_total(value: Any) -> Optional[int]:
    """
    Read the complete length from a Content-Range header such as
    "bytes 0-499/1234".

    Returns:
        The complete length, or None when missing, unknown ("/*") or unparseable
    """
    if value is None:
        return None
    match = _CONTENT_RANGE.match(str(value))
    return int(match.group(1)) if match else None


def _body_length(body: Any) -> Optional[int]:
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray, str)):
        return len(body)
    return None


@dataclass(frozen=True)
class CompletedExchange:
    """One completed request/response pair, stripped to what discovery needs."""
    method: str
    url: str
    status_code: int
    request_headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    request_content_length: Optional[int] = None
    response_content_length: Optional[int] = None
    response_total_length: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "request_headers", CaseInsensitiveDict(self.request_headers))

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> Optional[str]:
        return self.request_headers.get(name)

    @classmethod
    def from_requests_response(cls, response: "requests.Response") -> "CompletedExchange":
        """
        Build from a `requests` response (its `.request` is the PreparedRequest).

        Args:
            response: a completed requests.Response

        Returns:
            CompletedExchange
        """
        request = response.request
        headers = CaseInsensitiveDict(request.headers or {})
        request_length = parse_content_length(headers.get("Content-Length"))
        if request_length is None:
            request_length = _body_length(request.body)
        return cls(
            method=request.method or "",
            url=request.url or "",
            status_code=response.status_code,
            request_headers=headers,
            request_content_length=request_length,
            response_content_length=parse_content_length(response.headers.get("Content-Length")),
            response_total_length=parse_content_range_total(response.headers.get("Content-Range")),
        )

    @classmethod
    def from_pipeline_response(cls, pipeline_response: Any) -> "CompletedExchange":
        """
        Build from an azure.core PipelineResponse, as passed to `raw_response_hook`.

        Args:
            pipeline_response: object with `.http_request` and `.http_response`

        Returns:
            CompletedExchange
        """
        http_request = pipeline_response.http_request
        http_response = pipeline_response.http_response
        headers = CaseInsensitiveDict(http_request.headers or {})
        request_length = parse_content_length(headers.get("Content-Length"))
        if request_length is None:
            request_length = _body_length(getattr(http_request, "body", None))
        return cls(
            method=http_request.method,
            url=http_request.url,
            status_code=http_response.status_code,
            request_headers=headers,
            request_content_length=request_length,
            response_content_length=parse_content_length(http_response.headers.get("Content-Length")),
            response_total_length=parse_content_range_total(http_response.headers.get("Content-Range")),
        )
