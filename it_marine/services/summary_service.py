# ==============================================================================
# AI SUMMARY - Short status report written by Gemini
# ==============================================================================
# Read-only: the model receives a few counts and recent descriptions and
# returns free text. The text is shown to the user and never parsed back.
#
# One attempt per request, no retries. Any failure becomes a fixed message.
# ==============================================================================

from typing import Any, Dict, Optional

import httpx

from it_marine import config
from it_marine.models import AppData, TaskStatus

SYSTEM_INSTRUCTION = (
    'คุณเป็นผู้จัดการไอทีผู้เชี่ยวชาญ โปรดวิเคราะห์ข้อมูลแผนกไอทีนี้และสรุปสั้นๆ (3-4 ประโยค) '
    'เกี่ยวกับสถานะปัจจุบัน พร้อมระบุลำดับความสำคัญเร่งด่วน โดยตอบเป็น "ภาษาไทย" เท่านั้น '
    'เน้นการสรุปที่ชัดเจนเรื่องความพร้อมในการปฏิบัติงานของเรือและสำนักงาน'
)

EMPTY_ANSWER_MESSAGE = 'ไม่สามารถสร้างสรุปได้ในขณะนี้'
FAILURE_MESSAGE = 'เกิดข้อผิดพลาดในการเชื่อมต่อ AI'

RECENT_LOGS = 5


def summary_facts(data: AppData) -> Dict[str, Any]:
    """Counts and recent descriptions exposed to the summarizer."""
    return {
        'tickets': len(data.tickets),
        'openTickets': sum(1 for t in data.tickets if t.status != TaskStatus.COMPLETED),
        'recentWork': [log.task_description for log in data.work_logs[:RECENT_LOGS]],
        'assets': len(data.assets),
    }


def build_summary_prompt(data: AppData) -> str:
    facts = summary_facts(data)
    return (
        f"รายการแจ้งซ่อม/จัดซื้อปัจจุบัน: {facts['tickets']} รายการ "
        f"(กำลังดำเนินการ {facts['openTickets']} รายการ)\n"
        f"งานล่าสุด: {', '.join(facts['recentWork'])}\n"
        f"อุปกรณ์ทั้งหมด: {facts['assets']} รายการ"
    )


def _extract_text(payload: Dict[str, Any]) -> str:
    """Concatenates the text parts of the first candidate."""
    candidates = payload.get('candidates') or []
    if not candidates:
        return ''
    parts = (candidates[0].get('content') or {}).get('parts') or []
    return ''.join(part.get('text', '') for part in parts).strip()


class SummaryClient:
    """
    Client for the Gemini generateContent endpoint.

    Usage:
        client = SummaryClient(api_key=config.GEMINI_API_KEY)
        text = client.summarize(store.snapshot)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = None,
        http_client: httpx.Client = None,
        timeout: float = None
    ):
        """
        Args:
            api_key: Gemini credential; without it no request is made
            model: Model name (config.GEMINI_MODEL by default)
            http_client: Injected httpx.Client (tests use a MockTransport)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model = model or config.GEMINI_MODEL
        self.timeout = timeout or config.AI_TIMEOUT_SECONDS
        self._http_client = http_client

    def _request(self, prompt: str) -> httpx.Response:
        url = config.GEMINI_ENDPOINT.format(model=self.model)
        payload = {
            'systemInstruction': {'parts': [{'text': SYSTEM_INSTRUCTION}]},
            'contents': [{'role': 'user', 'parts': [{'text': prompt}]}],
        }
        headers = {'x-goog-api-key': self.api_key, 'Content-Type': 'application/json'}
        if self._http_client is not None:
            return self._http_client.post(url, json=payload, headers=headers, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(url, json=payload, headers=headers)

    def summarize(self, data: AppData) -> str:
        """
        Returns:
            Model text, EMPTY_ANSWER_MESSAGE for an empty answer, or
            FAILURE_MESSAGE on any error (never raises)
        """
        if not self.api_key:
            print("[AI] GEMINI_API_KEY not set")
            return FAILURE_MESSAGE
        try:
            response = self._request(build_summary_prompt(data))
            response.raise_for_status()
            return _extract_text(response.json()) or EMPTY_ANSWER_MESSAGE
        except Exception as e:
            print(f"[AI ERROR] Gemini request failed: {e}")
            return FAILURE_MESSAGE
