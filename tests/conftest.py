"""Fixtures partagées : LLM déterministe, stockage temporaire, fiche d'exemple."""
import asyncio
import re
from unittest.mock import AsyncMock

import pytest

from listing_translator import prompts
from listing_translator.errors import InvalidResponse
from listing_translator.models import SourceContent
from listing_translator.store import ListingStore

PERSONA_FIELDS = {
    prompts.SUMMARY_PERSONA: "summary",
    prompts.DESCRIPTION_PERSONA: "description",
    prompts.KEYWORD_PERSONA: "keyword",
}

TARGET_RE = re.compile(r"(?:into|to) ([^\n]+?)\.\n")


class FakeLLM:
    """Préfixe le texte source par le nom de la langue cible.

    ``fail`` accepte des types de champ (``"description"``) ou des couples
    ``(langue, type)``. ``delays`` retarde les réponses par langue.
    """

    def __init__(self, fail=(), delays=None, reply=None):
        self.fail = set(fail)
        self.delays = delays or {}
        self.reply = reply
        self.calls = []
        self.complete = AsyncMock(side_effect=self._complete)
        self.close = AsyncMock()

    async def _complete(self, system_prompt, user_prompt, max_tokens, temperature=0.0):
        field = PERSONA_FIELDS[system_prompt]
        language = TARGET_RE.search(user_prompt).group(1)
        self.calls.append((language, field))

        delay = self.delays.get(language)
        if delay:
            await asyncio.sleep(delay)

        if field in self.fail or (language, field) in self.fail:
            raise InvalidResponse(f"LLM returned status 500 for {field}")

        if self.reply is not None:
            return self.reply
        text = user_prompt.rsplit("Text to translate: ", 1)[1]
        return f"[{language}] {text}"

    def calls_for(self, language):
        return [field for name, field in self.calls if name == language]


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def store(tmp_path):
    return ListingStore(tmp_path / "listing.db")


@pytest.fixture
def content():
    return SourceContent(
        name="Acme Sync",
        summary="Hello world",
        description="<p>Hi</p>",
        keyword1="sync",
        keyword2="backup",
        keyword3="",
    )


@pytest.fixture
def make_llm():
    """Fabrique de ``FakeLLM`` paramétrables."""
    return FakeLLM
