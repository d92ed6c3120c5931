"""Traduction d'un champ de fiche produit via le LLM."""
from __future__ import annotations

import logging
import re
from typing import Optional

from listing_translator.errors import TranslationFailure
from listing_translator.fields import FieldKind, FieldPolicy
from listing_translator.llm import LLMClient
from listing_translator.prompts import render_prompt

logger = logging.getLogger(__name__)

TAG_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")
ELLIPSIS = "..."


def to_plain_text(text: str, max_chars: Optional[int]) -> str:
    """
    Ramène une sortie du modèle à du texte brut borné.

    Supprime les balises (et tout ``<`` orphelin), réduit les espaces,
    puis tronque à ``max_chars`` caractères, points de suspension compris.
    """
    result = TAG_RE.sub("", text).replace("<", "")
    result = WHITESPACE_RE.sub(" ", result).strip()
    if max_chars is not None and len(result) > max_chars:
        result = result[: max_chars - len(ELLIPSIS)].rstrip() + ELLIPSIS
    return result


class ListingTranslator:
    """Traduit un texte pour une langue et un type de champ donnés."""

    def __init__(self, llm: LLMClient, policy: Optional[FieldPolicy] = None) -> None:
        self.llm = llm
        self.policy = policy or FieldPolicy()

    async def translate(
        self,
        text: str,
        target_language_name: str,
        field_kind: FieldKind,
        language_code: Optional[str] = None,
        policy: Optional[FieldPolicy] = None,
    ) -> str:
        """Traduit ``text`` ; toute erreur devient une ``TranslationFailure``."""
        profile = (policy or self.policy).profile(field_kind)
        prompt = render_prompt(
            profile.prompt_template,
            target_language_name,
            text,
            max_chars=profile.max_chars,
        )

        logger.debug("Translating %s to %s (%s chars)", field_kind.value, target_language_name, len(text))
        try:
            result = await self.llm.complete(
                profile.system_persona,
                prompt,
                max_tokens=profile.max_output_tokens,
                temperature=0,
            )
        except Exception as exc:
            raise TranslationFailure(language_code or target_language_name, field_kind.value, exc) from exc

        if profile.plain_text_only:
            return to_plain_text(result, profile.max_chars)
        return result.strip()
