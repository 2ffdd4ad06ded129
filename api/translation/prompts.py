"""
Prompt builders for LLM-backed lyrics translation.
"""

from __future__ import annotations


def translator_system_prompt(target_language: str) -> str:
    return (
        "You are a professional translator.\n"
        f"Translate the following song lyrics into the language with code \"{target_language}\" "
        "while preserving the poetic style, rhyme and rhythm where possible.\n"
        "Keep the line breaks: return exactly one translated line for every input line, in the same order.\n"
        "Return only the translated lyrics, with no numbering, notes or commentary."
    )


def translator_user_prompt(lines: list[str]) -> str:
    return "\n".join(lines)
