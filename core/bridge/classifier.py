# core/bridge/classifier.py
"""
Classification of endpoint responses.

Pure functions only: the classifier decides which Outcome a (status, body)
pair maps to and which diagnostic file name a failure wants, but never
touches the filesystem. Writing the body is the pipeline's job.
"""

import json

from core.bridge.models import Failure, FailureKind, Outcome, ProxyResponse, Success

ERROR_RESPONSE_FILE = 'error_response.html'
HTML_RESPONSE_FILE = 'html_response_body.html'

DOCTYPE_MARKER = '<!DOCTYPE'
BODY_EXCERPT_LIMIT = 1000


class ResponseDecodeError(ValueError):
    pass


def is_success_status(status: int) -> bool:
    return 200 <= status < 300


def looks_like_json(body: str) -> bool:
    """Shape sniff: a JSON object body starts with '{' and is not an HTML page"""
    stripped = body.lstrip()
    if stripped.startswith(DOCTYPE_MARKER):
        return False
    return stripped.startswith('{')


def _reject_constant(name: str):
    raise ResponseDecodeError(f"non-standard JSON constant {name}")


def parse_proxy_response(body: str) -> ProxyResponse:
    """
    Strictly decode a success body.

    Raises:
        ResponseDecodeError: Body is not a JSON object with a string ``text``
    """
    try:
        data = json.loads(body, parse_constant=_reject_constant)
    except ValueError as e:
        raise ResponseDecodeError(f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise ResponseDecodeError(f"expected a JSON object, got {type(data).__name__}")

    text = data.get('text')
    if text is None:
        raise ResponseDecodeError("missing field 'text'")
    if not isinstance(text, str):
        raise ResponseDecodeError(f"field 'text' must be a string, got {type(text).__name__}")

    category = data.get('category')
    if category is not None and not isinstance(category, str):
        raise ResponseDecodeError(
            f"field 'category' must be a string, got {type(category).__name__}"
        )

    return ProxyResponse(text=text, category=category)


def _excerpt(body: str, limit: int = BODY_EXCERPT_LIMIT) -> str:
    if len(body) <= limit:
        return body
    return body[:limit] + f"... ({len(body) - limit} more characters)"


def classify(status: int, body: str, url: str) -> Outcome:
    """
    Map one HTTP exchange to an Outcome.

    Order matters: status first, then the shape sniff (catches HTML error
    pages served with 200), then strict decoding.
    """
    if not is_success_status(status):
        return Failure(
            kind=FailureKind.SERVER_ERROR,
            url=url,
            status_code=status,
            diagnostic_name=ERROR_RESPONSE_FILE,
        )

    if not looks_like_json(body):
        return Failure(
            kind=FailureKind.UNEXPECTED_CONTENT_TYPE,
            url=url,
            status_code=status,
            diagnostic_name=HTML_RESPONSE_FILE,
        )

    try:
        response = parse_proxy_response(body)
    except ResponseDecodeError as e:
        return Failure(
            kind=FailureKind.DECODE_ERROR,
            url=url,
            status_code=status,
            cause=str(e),
            body_excerpt=_excerpt(body),
        )

    return Success(text=response.text)

