"""
Machine-translation clients for lyrics.

Both backends take an ordered list of lines and return a list of the same
length. A translation that comes back empty or with a different line count
is a `TranslationFailedError`; transport and protocol faults are
`TranslatorError`.

Backends:
- Yandex Cloud Translate v2  -> POST /translate/v2/translate
- DeepSeek chat completions  -> POST /v1/chat/completions
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from core import settings
from lyrics.client import format_lyrics

from . import prompts

logger = logging.getLogger(__name__)


class TranslatorError(RuntimeError):
    pass


class TranslationFailedError(TranslatorError):
    pass


def _checked_lines(translated_text: str, *, expected: int) -> list[str]:
    lines = format_lyrics(translated_text)
    if not lines:
        raise TranslationFailedError("Translator returned an empty translation.")
    if len(lines) != expected:
        raise TranslationFailedError(
            f"Translation has {len(lines)} lines, expected {expected}."
        )
    return lines


async def _post_json(
    http: httpx.AsyncClient,
    url: str,
    *,
    payload: dict[str, Any],
    headers: dict[str, str],
    backend: str,
) -> dict[str, Any]:
    try:
        resp = await http.post(url, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise TranslatorError(f"{backend} request failed: {exc}") from exc

    logger.debug("translator_response backend=%s status=%s", backend, resp.status_code)
    if resp.status_code != 200:
        raise TranslatorError(f"{backend} request failed: {resp.status_code} {resp.text[:300]}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise TranslatorError(f"{backend} returned a non-JSON body.") from exc
    if not isinstance(data, dict):
        raise TranslatorError(f"{backend} returned an unexpected body.")
    return data


class YandexTranslator:
    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_key: str,
        target_language: str | None = None,
        url: str | None = None,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._target_language = target_language or settings.translate_target_language()
        self._url = url or settings.yandex_translate_url()

    async def translate(self, lines: list[str]) -> list[str]:
        if not lines:
            raise TranslationFailedError("Nothing to translate.")
        logger.info("translate backend=yandex lines=%s target=%s", len(lines), self._target_language)

        data = await _post_json(
            self._http,
            self._url,
            payload={
                "texts": ["\n".join(lines)],
                "targetLanguageCode": self._target_language,
            },
            headers={"Authorization": f"Api-Key {self._api_key}"},
            backend="yandex",
        )

        translations = data.get("translations")
        if not isinstance(translations, list) or not translations:
            raise TranslationFailedError("Yandex returned no translations.")
        first = translations[0]
        text = first.get("text") if isinstance(first, dict) else None
        if not isinstance(text, str):
            raise TranslationFailedError("Yandex returned a translation without text.")
        return _checked_lines(text, expected=len(lines))


class DeepSeekTranslator:
    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_key: str,
        target_language: str | None = None,
        model: str | None = None,
        url: str | None = None,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._target_language = target_language or settings.translate_target_language()
        self._model = model or settings.deepseek_model()
        self._url = url or settings.deepseek_url()

    async def translate(self, lines: list[str]) -> list[str]:
        if not lines:
            raise TranslationFailedError("Nothing to translate.")
        logger.info("translate backend=deepseek model=%s lines=%s", self._model, len(lines))

        data = await _post_json(
            self._http,
            self._url,
            payload={
                "model": self._model,
                "messages": [
                    {"role": "system", "content": prompts.translator_system_prompt(self._target_language)},
                    {"role": "user", "content": prompts.translator_user_prompt(lines)},
                ],
                "stream": False,
            },
            headers={"Authorization": f"Bearer {self._api_key}"},
            backend="deepseek",
        )

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise TranslationFailedError("DeepSeek returned no choices.")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise TranslationFailedError("DeepSeek returned an empty message.")
        return _checked_lines(content, expected=len(lines))


def build_translator(http: httpx.AsyncClient) -> YandexTranslator | DeepSeekTranslator:
    """
    Pick the translation backend from the TRANSLATOR env var.
    """
    backend = settings.translator_backend()
    if backend == "deepseek":
        api_key = settings.deepseek_api_key()
        if not api_key:
            raise RuntimeError("DEEPSEEK_API_KEY is not set.")
        return DeepSeekTranslator(http, api_key=api_key)
    if backend == "yandex":
        api_key = settings.yandex_translate_api_key()
        if not api_key:
            raise RuntimeError("YANDEX_TRANSLATE_API_KEY is not set.")
        return YandexTranslator(http, api_key=api_key)
    raise RuntimeError(f"Unknown TRANSLATOR backend: {backend!r}.")
