# -*- coding: utf-8 -*-
"""
Day report, JPEG encoding and AI summary
"""
import base64
import json

import httpx
import pytest

from it_marine.constants import PERMANENT_STAFF_NAME
from it_marine.models import AppData, TaskStatus
from it_marine.services import (
    SummaryClient,
    UnsupportedImageError,
    build_day_report,
    build_summary_prompt,
    encode_jpeg,
    translate_status,
)
from it_marine.services.summary_service import EMPTY_ANSWER_MESSAGE, FAILURE_MESSAGE

JPEG_BYTES = b'\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body'


# =============================================================================
# DAY REPORT
# =============================================================================

def test_day_report_rows_for_one_date(store):
    log = store.add_work_log('2025-06-01', '13:30', 'เรือ 105', 'เปลี่ยนเราเตอร์', TaskStatus.IN_PROGRESS)
    store.add_work_log('2025-05-31', '08:00', 'ท่าเรือ', 'งานเมื่อวาน')

    report = build_day_report(store.snapshot, '2025-06-01')

    assert report['staffName'] == PERMANENT_STAFF_NAME
    assert report['formattedDate'] == '1 มิถุนายน 2568'
    assert [row['taskDescription'] for row in report['rows']] == [
        log.task_description, store.snapshot.work_logs[-1].task_description,
    ]
    assert report['rows'][0]['statusLabel'] == 'กำลังทำ'


def test_day_report_empty_date(store):
    report = build_day_report(store.snapshot, '2020-01-01')
    assert report['rows'] == []


def test_status_labels():
    assert translate_status(TaskStatus.PENDING) == 'รอดำเนินการ'
    assert translate_status(TaskStatus.WAITING_PURCHASE) == 'รอจัดซื้อ'
    assert translate_status(TaskStatus.COMPLETED) == 'เสร็จสิ้น'
    assert translate_status(TaskStatus.CANCELLED) == 'ยกเลิก'


# =============================================================================
# IMAGES
# =============================================================================

def test_encode_jpeg_returns_data_uri():
    uri = encode_jpeg('photo.JPG', 'image/jpeg', JPEG_BYTES)
    assert uri.startswith('data:image/jpeg;base64,')
    assert base64.b64decode(uri.split(',', 1)[1]) == JPEG_BYTES


@pytest.mark.parametrize('filename, content_type, data', [
    ('photo.png', 'image/png', b'\x89PNG\r\n\x1a\n'),
    ('photo.jpg', 'image/jpeg', b'\x89PNG\r\n\x1a\n'),
    ('notes.txt', 'text/plain', JPEG_BYTES),
    ('empty.jpg', 'image/jpeg', b''),
])
def test_encode_jpeg_rejects_other_files(filename, content_type, data):
    with pytest.raises(UnsupportedImageError) as exc:
        encode_jpeg(filename, content_type, data)
    assert 'JPEG' in str(exc.value)


# =============================================================================
# AI SUMMARY
# =============================================================================

def _client_with(handler, api_key='test-key'):
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return SummaryClient(api_key=api_key, model='test-model', http_client=http_client)


def test_summary_prompt_mentions_counts(store):
    prompt = build_summary_prompt(store.snapshot)
    assert '1 รายการ' in prompt
    assert 'ตรวจสอบความเรียบร้อยระบบเครือข่าย' in prompt


def test_summary_success(store):
    seen = {}

    def handler(request):
        seen['url'] = str(request.url)
        seen['key'] = request.headers.get('x-goog-api-key')
        seen['body'] = json.loads(request.content)
        return httpx.Response(200, json={
            'candidates': [{'content': {'parts': [{'text': 'ทุกอย่างเรียบร้อย'}]}}],
        })

    text = _client_with(handler).summarize(store.snapshot)

    assert text == 'ทุกอย่างเรียบร้อย'
    assert 'models/test-model:generateContent' in seen['url']
    assert seen['key'] == 'test-key'
    assert seen['body']['contents'][0]['parts'][0]['text'] == build_summary_prompt(store.snapshot)


def test_summary_empty_answer(store):
    client = _client_with(lambda request: httpx.Response(200, json={'candidates': []}))
    assert client.summarize(store.snapshot) == EMPTY_ANSWER_MESSAGE


def test_summary_http_error(store):
    client = _client_with(lambda request: httpx.Response(500, json={'error': 'boom'}))
    assert client.summarize(store.snapshot) == FAILURE_MESSAGE


def test_summary_network_error(store):
    def handler(request):
        raise httpx.ConnectError('unreachable', request=request)

    assert _client_with(handler).summarize(store.snapshot) == FAILURE_MESSAGE


def test_summary_without_key_makes_no_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    assert _client_with(handler, api_key=None).summarize(AppData()) == FAILURE_MESSAGE
    assert calls == []
