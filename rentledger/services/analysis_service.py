"""AI analysis of a billing period using Ollama.

The model call is an external collaborator that may fail for any reason
(network, quota, model error). Failures never reach the caller: they are
logged and replaced with a fixed localized fallback message.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ollama import AsyncClient

from rentledger.config import get_app_config
from rentledger.schemas.ledger import Reading, Room
from rentledger.services.localizer import t

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """
Dưới đây là dữ liệu quản lý phòng trọ cho tháng {period}:
Cấu hình phòng: {rooms}
Chỉ số điện nước: {readings}

Hãy phân tích và đưa ra:
1. Tổng quan doanh thu dự kiến.
2. Các phòng có mức tiêu thụ điện/nước bất thường (cao hơn trung bình).
3. Đề xuất thông báo nhắc nhở đóng tiền chuyên nghiệp bằng tiếng Việt cho chủ nhà gửi cho khách.
4. Gợi ý tối ưu chi phí vận hành.

Trả về phản hồi bằng Markdown dễ đọc, trình bày đẹp mắt.
"""


def fallback_message() -> str:
    return t("errors.ai_unavailable")


def build_prompt(rooms: Iterable[Room], readings: Iterable[Reading], period: str) -> str:
    """Render the analysis prompt for one period.

    PINs and receipt images are left out of the payload.
    """
    room_payload = [room.model_dump(by_alias=True, exclude={"pin"}) for room in rooms]
    reading_payload = [
        reading.model_dump(by_alias=True, exclude={"receipt_image"})
        for reading in readings
        if reading.month == period
    ]
    return ANALYSIS_PROMPT.format(
        period=period,
        rooms=json.dumps(room_payload, ensure_ascii=False),
        readings=json.dumps(reading_payload, ensure_ascii=False),
    )


@dataclass
class AnalysisResult:
    """Latest analysis text. Written only by analysis, never by the ledger."""

    period: str
    text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AnalysisService:
    """Async Ollama client producing a Markdown summary of a period."""

    def __init__(
        self,
        model: str | None = None,
        host: str | None = None,
        enabled: bool | None = None,
        client: AsyncClient | None = None,
    ):
        config = get_app_config()
        self.model = model or config.ollama_model
        self.enabled = config.llm_enabled if enabled is None else enabled
        self.client = client or AsyncClient(host=host or config.ollama_host)

    async def summarize(self, rooms: list[Room], readings: list[Reading], period: str) -> str:
        """Ask the model to analyse a period.

        Returns:
            Model text, or the fallback message if the call fails or is disabled
        """
        if not self.enabled:
            logger.info("AI analysis disabled; returning fallback for %s", period)
            return fallback_message()

        prompt = build_prompt(rooms, readings, period)
        try:
            response = await self.client.chat(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
            content = response.message.content if response.message else None
        except Exception as e:
            logger.error("AI analysis error for %s: %s", period, e, exc_info=True)
            return fallback_message()

        if not content:
            logger.warning("AI analysis returned empty content for %s", period)
            return fallback_message()
        return content


__all__ = [
    "ANALYSIS_PROMPT",
    "AnalysisResult",
    "AnalysisService",
    "build_prompt",
    "fallback_message",
]
