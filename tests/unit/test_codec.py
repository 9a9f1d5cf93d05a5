"""Tests for captionai.gateway.codec: prompt, payload and reply shaping.

Tests cover:
- Instruction composition with and without user choices.
- Data-URL decomposition and its failure modes.
- Payload layout sent to generateContent.
- Reply text extraction and caption line filtering.
"""

from __future__ import annotations

import pytest

from captionai.gateway.codec import (
    build_payload,
    compose_instruction,
    decode_result,
    extract_text,
    parse_captions,
    split_data_url,
)
from captionai.gateway.errors import EmptyResponseError, EncodingError
from captionai.gateway.schema import GenerationRequest, Language, Platform, Tone


class TestComposeInstruction:
    def test_all_choices_appear_verbatim(self):
        req = GenerationRequest(
            image_data_url="data:image/png;base64,AAAA",
            platform=Platform.instagram,
            tone=Tone.witty,
            language=Language.spanish,
            context="sunset at the beach",
        )
        text = compose_instruction(req)
        for expected in ("Instagram", "Witty", "Spanish", "sunset at the beach"):
            assert expected in text

    def test_defaults_when_absent(self):
        text = compose_instruction(GenerationRequest(image_data_url="data:image/png;base64,AAAA"))
        assert "Platform: general" in text
        assert "Tone: engaging" in text
        assert "Language: English" in text
        assert "Context:" not in text

    def test_asks_for_five_lines_without_commentary(self):
        text = compose_instruction(GenerationRequest(image_data_url="data:image/png;base64,AAAA"))
        assert "exactly 5" in text
        assert "one per line" in text
        assert "no numbering or extra commentary" in text


class TestSplitDataUrl:
    def test_splits_mime_and_payload(self):
        assert split_data_url("data:image/webp;base64,QUJD") == ("image/webp", "QUJD")

    def test_missing_comma_raises(self):
        with pytest.raises(EncodingError):
            split_data_url("data:image/png;base64")

    def test_missing_colon_raises(self):
        with pytest.raises(EncodingError):
            split_data_url("image/png;base64,AAAA")

    def test_empty_mime_raises(self):
        with pytest.raises(EncodingError, match="MimeType"):
            split_data_url("data:;base64,AAAA")


class TestBuildPayload:
    def test_payload_layout(self):
        req = GenerationRequest(image_data_url="data:image/jpeg;base64,/9j/", tone=Tone.direct)
        payload = build_payload(req, temperature=0.8)

        parts = payload["contents"][0]["parts"]
        assert parts[0]["text"] == compose_instruction(req)
        assert parts[1] == {"inlineData": {"mimeType": "image/jpeg", "data": "/9j/"}}
        assert payload["generationConfig"] == {"temperature": 0.8}

    def test_bad_data_url_raises_encoding_error(self):
        with pytest.raises(EncodingError):
            build_payload(GenerationRequest(image_data_url="not a data url"), temperature=0.8)


class TestExtractText:
    def test_reads_first_candidate_first_part(self, gemini_body):
        assert extract_text(gemini_body("hello there")) == "hello there"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"candidates": []},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"finishReason": "SAFETY"}]},
            {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
            None,
            [],
        ],
    )
    def test_missing_path_returns_none(self, body):
        assert extract_text(body) is None


class TestParseCaptions:
    def test_drops_short_and_blank_lines(self):
        text = "A great sunset.\nHi\nSecond great caption here\n\n"
        assert parse_captions(text) == ["A great sunset.", "Second great caption here"]

    def test_keeps_first_five_in_order(self):
        lines = [f"Caption number {i}" for i in range(1, 9)]
        assert parse_captions("\n".join(lines)) == lines[:5]

    def test_trims_whitespace_and_crlf(self):
        assert parse_captions("   padded caption   \r\nanother one!\r\n") == ["padded caption", "another one!"]

    def test_splits_on_newline_only(self):
        text = "Caption one\x0cstill caption one\nSecond caption here same line"
        assert parse_captions(text) == ["Caption one\x0cstill caption one", "Second caption here same line"]

    def test_exactly_five_chars_is_dropped(self):
        assert parse_captions("12345\n123456") == ["123456"]


class TestDecodeResult:
    def test_missing_text_is_empty_response(self):
        with pytest.raises(EmptyResponseError):
            decode_result({"candidates": []})

    def test_blank_text_is_empty_response(self, gemini_body):
        with pytest.raises(EmptyResponseError):
            decode_result(gemini_body(""))

    def test_all_lines_filtered_is_zero_captions(self, gemini_body):
        result = decode_result(gemini_body("Hi\nok\n\n"))
        assert len(result) == 0
        assert result.as_list() == []
