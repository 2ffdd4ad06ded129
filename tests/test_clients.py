"""
Tests for the lyrics.ovh client and the translation backends, driven through
httpx.MockTransport.
"""

from __future__ import annotations

import json

import httpx
import pytest

from lyrics.client import LyricsNotFoundError, LyricsOvhClient, LyricsProviderError, format_lyrics
from translation.client import (
    DeepSeekTranslator,
    TranslationFailedError,
    TranslatorError,
    YandexTranslator,
    build_translator,
)


def _http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================================
# Lyrics
# =============================================================================


class TestFormatLyrics:
    def test_drops_blank_lines_and_trims(self) -> None:
        text = "Hello, it's me\r\n\r\n  I was wondering  \n\nTo go over everything\n"
        assert format_lyrics(text) == ["Hello, it's me", "I was wondering", "To go over everything"]

    def test_empty(self) -> None:
        assert format_lyrics("") == []
        assert format_lyrics(" \n \r\n") == []


class TestLyricsOvhClient:
    async def test_fetch(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path.decode())
            return httpx.Response(200, json={"lyrics": "Line one\n\nLine two"})

        async with _http(handler) as http:
            client = LyricsOvhClient(http, base_url="https://lyrics.test/v1")
            assert await client.fetch("AC/DC", "Back In Black") == ["Line one", "Line two"]
        assert seen == ["/v1/AC%2FDC/Back%20In%20Black"]

    async def test_404_is_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "No lyrics found"})

        async with _http(handler) as http:
            with pytest.raises(LyricsNotFoundError):
                await LyricsOvhClient(http, base_url="https://lyrics.test/v1").fetch("a", "b")

    async def test_empty_lyrics_is_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"lyrics": "  \n"})

        async with _http(handler) as http:
            with pytest.raises(LyricsNotFoundError):
                await LyricsOvhClient(http, base_url="https://lyrics.test/v1").fetch("a", "b")

    async def test_server_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="oops")

        async with _http(handler) as http:
            with pytest.raises(LyricsProviderError) as excinfo:
                await LyricsOvhClient(http, base_url="https://lyrics.test/v1").fetch("a", "b")
        assert not isinstance(excinfo.value, LyricsNotFoundError)

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _http(handler) as http:
            with pytest.raises(LyricsProviderError):
                await LyricsOvhClient(http, base_url="https://lyrics.test/v1").fetch("a", "b")


# =============================================================================
# Translation
# =============================================================================


class TestYandexTranslator:
    async def test_translate(self) -> None:
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"translations": [{"text": "Привет\nКак дела"}]})

        async with _http(handler) as http:
            translator = YandexTranslator(http, api_key="k", target_language="ru", url="https://tr.test/")
            assert await translator.translate(["Hello", "How are you"]) == ["Привет", "Как дела"]

        assert captured["auth"] == "Api-Key k"
        assert captured["body"] == {"texts": ["Hello\nHow are you"], "targetLanguageCode": "ru"}

    async def test_no_translations(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"translations": []})

        async with _http(handler) as http:
            translator = YandexTranslator(http, api_key="k", url="https://tr.test/")
            with pytest.raises(TranslationFailedError):
                await translator.translate(["Hello"])

    async def test_line_count_mismatch(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"translations": [{"text": "Привет, как дела"}]})

        async with _http(handler) as http:
            translator = YandexTranslator(http, api_key="k", url="https://tr.test/")
            with pytest.raises(TranslationFailedError):
                await translator.translate(["Hello", "How are you"])

    async def test_http_error_is_translator_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "unauthorized"})

        async with _http(handler) as http:
            translator = YandexTranslator(http, api_key="bad", url="https://tr.test/")
            with pytest.raises(TranslatorError) as excinfo:
                await translator.translate(["Hello"])
        assert not isinstance(excinfo.value, TranslationFailedError)


class TestDeepSeekTranslator:
    async def test_translate(self) -> None:
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"choices": [{"message": {"role": "assistant", "content": "Привет\n\nПока"}}]},
            )

        async with _http(handler) as http:
            translator = DeepSeekTranslator(http, api_key="t", model="deepseek-chat", url="https://ds.test/")
            assert await translator.translate(["Hello", "Goodbye"]) == ["Привет", "Пока"]

        assert captured["auth"] == "Bearer t"
        assert captured["body"]["model"] == "deepseek-chat"
        assert captured["body"]["messages"][1]["content"] == "Hello\nGoodbye"

    async def test_empty_choices(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"choices": []})

        async with _http(handler) as http:
            translator = DeepSeekTranslator(http, api_key="t", url="https://ds.test/")
            with pytest.raises(TranslationFailedError):
                await translator.translate(["Hello"])


class TestBuildTranslator:
    async def test_defaults_to_yandex(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TRANSLATOR", raising=False)
        monkeypatch.setenv("YANDEX_TRANSLATE_API_KEY", "k")
        async with httpx.AsyncClient() as http:
            assert isinstance(build_translator(http), YandexTranslator)

    async def test_deepseek(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRANSLATOR", "DeepSeek")
        monkeypatch.setenv("DEEPSEEK_API_KEY", "t")
        async with httpx.AsyncClient() as http:
            assert isinstance(build_translator(http), DeepSeekTranslator)

    async def test_missing_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRANSLATOR", "yandex")
        monkeypatch.delenv("YANDEX_TRANSLATE_API_KEY", raising=False)
        async with httpx.AsyncClient() as http:
            with pytest.raises(RuntimeError):
                build_translator(http)
