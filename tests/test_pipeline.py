"""
tests/test_pipeline.py

BridgePipeline with an injected transport, and the UI entry point end to end.

Verifies:
✔ 200 + {"text": ...} yields Success
✔ 500 yields SERVER_ERROR and saves the exact body
✔ 200 + HTML yields UNEXPECTED_CONTENT_TYPE under the HTML file name
✔ 200 + JSON without text yields DECODE_ERROR and writes nothing
✔ Timeouts yield TRANSPORT_ERROR referencing the URL
✔ Repeated failures overwrite the diagnostic file
"""

import asyncio
import json
from decimal import Decimal

import pytest
from aiohttp import web
from aiohttp import test_utils

from conftest import TEST_URL, FakeTransport, MemorySink
from core.bridge import BridgePipeline, BridgeRequest, Failure, FailureKind, SliderOptions, Success
from core.bridge.classifier import ERROR_RESPONSE_FILE, HTML_RESPONSE_FILE
from core.bridge.diagnostics import FileDiagnosticsSink
from core.bridge.encoder import PayloadError
from core.bridge.pipeline import process_gemini_request
from core.bridge.transport import TransportFailure
from core.config_manager import BridgeConfig


def make_pipeline(config, transport, sink=None):
    return BridgePipeline(config, transport=transport, sink=sink or MemorySink())


class TestBridgePipeline:
    @pytest.mark.asyncio
    async def test_success(self, bridge_config):
        transport = FakeTransport(status=200, body=b'{"text":"hello"}')
        outcome = await make_pipeline(bridge_config, transport).run(BridgeRequest(prompt="hi"))

        assert outcome == Success(text="hello")
        assert json.loads(transport.sent[0]) == {"prompt": "hi"}

    @pytest.mark.asyncio
    async def test_server_error_saves_exact_body(self, bridge_config):
        body = b"<html>\xe2\x9c\x97 Internal Server Error</html>"
        transport = FakeTransport(status=500, body=body)
        sink = FileDiagnosticsSink(bridge_config.diagnostics_dir)

        outcome = await make_pipeline(bridge_config, transport, sink).run(BridgeRequest(prompt="hi"))

        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.SERVER_ERROR
        assert "500" in outcome.describe()
        assert outcome.diagnostic_path == bridge_config.diagnostics_dir / ERROR_RESPONSE_FILE
        assert outcome.diagnostic_path.read_bytes() == body

    @pytest.mark.asyncio
    async def test_html_with_200_saves_html_file(self, bridge_config):
        transport = FakeTransport(status=200, body=b"<!DOCTYPE html><html>...</html>")
        sink = FileDiagnosticsSink(bridge_config.diagnostics_dir)

        outcome = await make_pipeline(bridge_config, transport, sink).run(BridgeRequest(prompt="hi"))

        assert outcome.kind is FailureKind.UNEXPECTED_CONTENT_TYPE
        assert (bridge_config.diagnostics_dir / HTML_RESPONSE_FILE).exists()
        assert not (bridge_config.diagnostics_dir / ERROR_RESPONSE_FILE).exists()

    @pytest.mark.asyncio
    async def test_decode_error_writes_no_diagnostic(self, bridge_config):
        transport = FakeTransport(status=200, body=b'{"oops":true}')
        sink = MemorySink()

        outcome = await make_pipeline(bridge_config, transport, sink).run(BridgeRequest(prompt="hi"))

        assert outcome.kind is FailureKind.DECODE_ERROR
        assert '{"oops":true}' in outcome.describe()
        assert sink.files == {}

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_transport_error(self, bridge_config):
        transport = FakeTransport(error=TransportFailure(TEST_URL, "no response within 60 seconds"))

        outcome = await make_pipeline(bridge_config, transport).run(BridgeRequest(prompt="hi"))

        assert outcome.kind is FailureKind.TRANSPORT_ERROR
        assert outcome.url == TEST_URL
        assert TEST_URL in outcome.describe()

    @pytest.mark.asyncio
    async def test_repeated_failure_overwrites_diagnostic(self, bridge_config):
        sink = FileDiagnosticsSink(bridge_config.diagnostics_dir)

        first = FakeTransport(status=500, body=b"x" * 1000)
        await make_pipeline(bridge_config, first, sink).run(BridgeRequest(prompt="hi"))
        second = FakeTransport(status=503, body=b"short")
        await make_pipeline(bridge_config, second, sink).run(BridgeRequest(prompt="hi"))

        path = bridge_config.diagnostics_dir / ERROR_RESPONSE_FILE
        assert path.stat().st_size == len(b"short")
        assert path.read_bytes() == b"short"

    @pytest.mark.asyncio
    async def test_failed_diagnostic_write_still_returns_failure(self, bridge_config, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way")
        sink = FileDiagnosticsSink(blocker)
        transport = FakeTransport(status=500, body=b"boom")

        outcome = await make_pipeline(bridge_config, transport, sink).run(BridgeRequest(prompt="hi"))

        assert outcome.kind is FailureKind.SERVER_ERROR
        assert outcome.diagnostic_path is None
        assert "could not be saved" in outcome.describe()


class TestProcessGeminiRequest:
    @pytest.mark.asyncio
    async def test_invalid_payload_is_reported(self, bridge_config):
        success, message = await process_gemini_request({"options": {}}, bridge_config)
        assert success is False
        assert "prompt" in message

    @pytest.mark.asyncio
    async def test_end_to_end_success(self, tmp_path):
        received = []

        async def handler(request):
            received.append(await request.json())
            return web.json_response({"text": "x = 2", "category": "math"})

        app = web.Application()
        app.router.add_post("/api/gemini", handler)

        async with test_utils.TestServer(app) as server:
            config = BridgeConfig(
                endpoint_url=str(server.make_url("/api/gemini")),
                diagnostics_dir=tmp_path,
            )
            success, text = await process_gemini_request(
                {
                    "prompt": "solve x + 1 = 3",
                    "options": {"summary": True, "answer": True},
                    "sliders": {"politeness": 0.5},
                    "images": {"problem": ["data:image/webp;base64,AAAA"]},
                },
                config,
            )

        assert (success, text) == (True, "x = 2")
        assert received == [{
            "prompt": "solve x + 1 = 3",
            "options": {"summary": True, "answer": True},
            "sliders": {"politeness": 0.5},
            "images": {"problem": ["data:image/webp;base64,AAAA"]},
        }]

    @pytest.mark.asyncio
    async def test_end_to_end_timeout(self, tmp_path):
        async def handler(request):
            await asyncio.sleep(1.0)
            return web.json_response({"text": "late"})

        app = web.Application()
        app.router.add_post("/api/gemini", handler)

        async with test_utils.TestServer(app) as server:
            url = str(server.make_url("/api/gemini"))
            config = BridgeConfig(endpoint_url=url, timeout=0.2, diagnostics_dir=tmp_path)
            success, message = await process_gemini_request({"prompt": "hi"}, config)

        assert success is False
        assert url in message
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_concurrent_invocations_are_independent(self, tmp_path):
        async def handler(request):
            payload = await request.json()
            return web.json_response({"text": payload["prompt"].upper()})

        app = web.Application()
        app.router.add_post("/api/gemini", handler)

        async with test_utils.TestServer(app) as server:
            config = BridgeConfig(
                endpoint_url=str(server.make_url("/api/gemini")),
                diagnostics_dir=tmp_path,
            )
            results = await asyncio.gather(*[
                process_gemini_request({"prompt": prompt}, config)
                for prompt in ("a", "b", "c")
            ])

        assert results == [(True, "A"), (True, "B"), (True, "C")]


class TestUnencodablePayloads:
    @pytest.mark.asyncio
    async def test_decimal_slider_is_reported_not_raised(self, bridge_config):
        success, message = await process_gemini_request(
            {"prompt": "p", "sliders": {"politeness": Decimal("0.5")}},
            bridge_config,
        )

        assert success is False
        assert message.startswith("Invalid request payload:")

    @pytest.mark.asyncio
    async def test_nan_slider_is_reported_not_raised(self, bridge_config):
        success, message = await process_gemini_request(
            {"prompt": "p", "sliders": {"politeness": float("nan")}},
            bridge_config,
        )

        assert success is False
        assert "politeness" in message

    @pytest.mark.asyncio
    async def test_nan_request_is_never_sent(self, bridge_config):
        transport = FakeTransport()
        request = BridgeRequest(prompt="p", sliders=SliderOptions(politeness=float("nan")))

        with pytest.raises(PayloadError):
            await make_pipeline(bridge_config, transport).run(request)

        assert transport.sent == []
