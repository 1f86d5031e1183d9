"""Unit tests for AI analysis with fallback."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from rentledger.schemas.ledger import Reading
from rentledger.services.analysis_service import AnalysisService, build_prompt, fallback_message

FALLBACK = "Không thể phân tích dữ liệu bằng AI lúc này. Vui lòng thử lại sau."


def _client(content=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat = AsyncMock(side_effect=error)
    else:
        client.chat = AsyncMock(return_value=SimpleNamespace(message=SimpleNamespace(content=content)))
    return client


@pytest.fixture
def readings():
    return [
        Reading(room_id="room-1", month="2024-01", curr_electricity=50, receipt_image="data:image/png;base64,AA"),
        Reading(room_id="room-1", month="2023-12", curr_electricity=10),
    ]


async def test_summarize_returns_model_text(rooms, readings):
    client = _client(content="## Tổng quan")
    service = AnalysisService(model="test-model", enabled=True, client=client)

    text = await service.summarize(rooms, readings, "2024-01")

    assert text == "## Tổng quan"
    kwargs = client.chat.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert "2024-01" in kwargs["messages"][0]["content"]


@pytest.mark.parametrize("error", [ConnectionError("refused"), TimeoutError(), RuntimeError("quota")])
async def test_summarize_failure_returns_fallback(rooms, readings, error):
    service = AnalysisService(enabled=True, client=_client(error=error))

    assert await service.summarize(rooms, readings, "2024-01") == FALLBACK


async def test_summarize_empty_content_returns_fallback(rooms, readings):
    service = AnalysisService(enabled=True, client=_client(content=""))

    assert await service.summarize(rooms, readings, "2024-01") == FALLBACK


async def test_summarize_disabled_skips_model(rooms, readings):
    client = _client(content="unused")
    service = AnalysisService(enabled=False, client=client)

    assert await service.summarize(rooms, readings, "2024-01") == FALLBACK
    client.chat.assert_not_called()


def test_fallback_message_is_localized():
    assert fallback_message() == FALLBACK


def test_build_prompt_filters_period_and_private_fields(rooms, readings):
    prompt = build_prompt(rooms, readings, "2024-01")

    assert "tháng 2024-01" in prompt
    assert "receiptImage" not in prompt
    assert '"pin"' not in prompt
    payload_line = next(line for line in prompt.splitlines() if line.startswith("Chỉ số điện nước:"))
    payload = json.loads(payload_line.split(":", 1)[1])
    assert [r["month"] for r in payload] == ["2024-01"]


@pytest.mark.parametrize("response", [None, SimpleNamespace(), {"message": {"content": "x"}}])
async def test_summarize_unexpected_response_returns_fallback(rooms, readings, response):
    client = MagicMock()
    client.chat = AsyncMock(return_value=response)
    service = AnalysisService(enabled=True, client=client)

    assert await service.summarize(rooms, readings, "2024-01") == FALLBACK
