# core/bridge/__init__.py
"""
Bridge between the desktop UI and the remote AI endpoint.

The desktop client does not build prompts or hold credentials: every request
is forwarded as-is and the web server does the rest.
"""

from core.bridge.models import (
    BridgeRequest,
    Failure,
    FailureKind,
    ImageSet,
    Outcome,
    SliderOptions,
    Success,
    SwitchOptions,
)
from core.bridge.pipeline import BridgePipeline, process_gemini_request

__all__ = [
    'BridgePipeline',
    'BridgeRequest',
    'Failure',
    'FailureKind',
    'ImageSet',
    'Outcome',
    'SliderOptions',
    'Success',
    'SwitchOptions',
    'process_gemini_request',
]
