from __future__ import annotations

import base64

from inbox_priority.parsing.parser import extract_body_from_payload, header_map, split_sender


def _b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def test_single_part_html_lands_in_html_slot() -> None:
    body = extract_body_from_payload({"mimeType": "text/html", "body": {"data": _b64("<b>hi</b>")}})

    assert body.html == "<b>hi</b>"
    assert body.text == ""


def test_nested_multipart_is_searched_depth_first() -> None:
    payload = {
        "mimeType": "multipart/mixed",
        "parts": [
            {
                "mimeType": "multipart/alternative",
                "parts": [{"mimeType": "text/plain", "body": {"data": _b64("nested text")}}],
            },
            {"mimeType": "application/pdf", "body": {"attachmentId": "x"}},
        ],
    }

    body = extract_body_from_payload(payload)

    assert body.text == "nested text"
    assert body.html == ""


def test_header_map_is_case_insensitive() -> None:
    headers = header_map({"headers": [{"name": "SUBJECT", "value": "Hi"}]})

    assert headers == {"subject": "Hi"}


def test_split_sender() -> None:
    assert split_sender('"Doe, Jane" <jane@example.com>') == ("jane@example.com", "Doe, Jane")
    assert split_sender("jane@example.com") == ("jane@example.com", "jane@example.com")
