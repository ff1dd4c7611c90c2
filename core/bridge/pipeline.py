# core/bridge/pipeline.py
"""
Bridge pipeline: encode -> POST -> classify -> (diagnostics).

``process_gemini_request`` is the single entry point the desktop UI calls.
"""

import dataclasses
import logging
from typing import Any, Mapping, Optional

from core.config_manager import BridgeConfig
from core.bridge.classifier import classify
from core.bridge.diagnostics import FileDiagnosticsSink
from core.bridge.encoder import PayloadError, encode_payload, request_from_dict
from core.bridge.models import BridgeRequest, Failure, FailureKind, Outcome, Success
from core.bridge.transport import TransportClient, TransportFailure

logger = logging.getLogger(__name__)


class BridgePipeline:
    """Forwards one request per ``run`` call; holds no per-request state"""

    def __init__(self, config: BridgeConfig, transport=None, sink=None):
        """
        Args:
            config: Endpoint and transport settings
            transport: Object with ``async post(body) -> RawResponse``
            sink: Object with ``write(name, body) -> Optional[Path]``
        """
        self.config = config
        self.transport = transport or TransportClient(config)
        self.sink = sink or FileDiagnosticsSink(config.diagnostics_dir)

    async def run(self, request: BridgeRequest) -> Outcome:
        url = self.config.endpoint_url
        body = encode_payload(request)

        logger.info(f"📤 Forwarding request to {url} ({len(body)} bytes)")

        try:
            raw = await self.transport.post(body)
        except TransportFailure as e:
            return Failure(kind=FailureKind.TRANSPORT_ERROR, url=e.url, cause=e.cause)

        outcome = classify(raw.status, raw.text, url)

        if isinstance(outcome, Success):
            logger.info(f"✅ Response received: {len(outcome.text)} characters")
            return outcome

        if outcome.diagnostic_name:
            path = self.sink.write(outcome.diagnostic_name, raw.body)
            outcome = dataclasses.replace(outcome, diagnostic_path=path)

        logger.error(
            f"❌ Request failed: {outcome.kind.value}\n"
            f"   URL: {url}\n"
            f"   Status: {outcome.status_code}\n"
            f"   Diagnostic file: {outcome.diagnostic_path}"
        )
        return outcome


async def process_gemini_request(payload: Mapping[str, Any],
                                 config: Optional[BridgeConfig] = None) -> tuple[bool, str]:
    """
    Forward a UI request and return the text to show

    Args:
        payload: Request object from the UI (prompt, options, sliders, images)
        config: Pipeline settings; defaults to BridgeConfig()

    Returns:
        tuple: (успех: bool, текст ответа или сообщение об ошибке: str)
    """
    try:
        request = request_from_dict(payload)
        outcome = await BridgePipeline(config or BridgeConfig()).run(request)
    except PayloadError as e:
        logger.error(f"❌ Invalid request payload: {e}")
        return False, f"Invalid request payload: {e}"

    if isinstance(outcome, Success):
        return True, outcome.text
    return False, outcome.describe()
