# core/bridge/models.py
"""
Data types shared by the bridge pipeline stages.

Requests are frozen so a payload cannot change between encoding and dispatch.
Outcomes are terminal values: the pipeline returns exactly one Success or one
Failure per invocation.
"""

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class SwitchOptions:
    """Answer sections the user switched on or off"""
    summary: Optional[bool] = None
    guidance: Optional[bool] = None
    explanation: Optional[bool] = None
    answer: Optional[bool] = None


@dataclass(frozen=True)
class SliderOptions:
    politeness: Optional[float] = None


@dataclass(frozen=True)
class ImageSet:
    """Attached images as opaque encoded strings (data URLs or bare base64)"""
    problem: Optional[Tuple[str, ...]] = None
    solution: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class BridgeRequest:
    prompt: str
    options: Optional[SwitchOptions] = None
    sliders: Optional[SliderOptions] = None
    images: Optional[ImageSet] = None


@dataclass(frozen=True)
class ProxyResponse:
    text: str
    category: Optional[str] = None


@dataclass(frozen=True)
class RawResponse:
    """Status and undecoded body of one HTTP exchange"""
    status: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')


class FailureKind(enum.Enum):
    TRANSPORT_ERROR = 'transport_error'
    SERVER_ERROR = 'server_error'
    UNEXPECTED_CONTENT_TYPE = 'unexpected_content_type'
    DECODE_ERROR = 'decode_error'


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Failure:
    """
    Structured failure of one invocation.

    Attributes:
        kind: Which stage rejected the exchange
        url: Endpoint the request was sent to
        status_code: HTTP status, when a response was received
        cause: Description of the underlying error
        diagnostic_name: Fixed file name the body should be persisted under
        diagnostic_path: Where the body was actually written (None if not written)
        body_excerpt: Leading part of the raw body, for inline reporting
    """
    kind: FailureKind
    url: str
    status_code: Optional[int] = None
    cause: Optional[str] = None
    diagnostic_name: Optional[str] = None
    diagnostic_path: Optional[Path] = None
    body_excerpt: Optional[str] = None

    def _saved_to(self) -> str:
        if self.diagnostic_path is not None:
            return f"Response body saved to: {self.diagnostic_path}"
        return "Response body could not be saved for diagnostics."

    def describe(self) -> str:
        """Human-readable message for the UI"""
        if self.kind is FailureKind.TRANSPORT_ERROR:
            return (
                f"Failed to send the request to the web server (URL: {self.url}). "
                f"Check that the server is deployed and running: {self.cause}"
            )

        if self.kind is FailureKind.SERVER_ERROR:
            return (
                f"Web server returned an error response (HTTP {self.status_code}). "
                f"{self._saved_to()}"
            )

        if self.kind is FailureKind.UNEXPECTED_CONTENT_TYPE:
            return (
                f"Web server returned a non-JSON response (HTTP {self.status_code}), "
                f"probably an HTML error page. {self._saved_to()}"
            )

        return (
            f"Failed to parse the JSON response from the web server: {self.cause}. "
            f"Raw response: {self.body_excerpt}"
        )


Outcome = Union[Success, Failure]
