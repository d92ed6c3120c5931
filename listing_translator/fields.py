"""Politique de traduction par champ de la fiche produit."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from listing_translator import prompts
from listing_translator.models import CONTENT_FIELDS, FieldLimits, FieldToggles, SourceContent


class FieldKind(str, Enum):
    """Type de champ, qui détermine le prompt et les limites."""
    SUMMARY = "summary"
    DESCRIPTION = "description"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class FieldProfile:
    """Règles de traduction d'un type de champ."""
    prompt_template: str
    system_persona: str
    max_output_tokens: int
    max_chars: Optional[int]
    plain_text_only: bool


# Champ de la fiche -> type de champ
FIELD_KINDS: Dict[str, FieldKind] = {
    "summary": FieldKind.SUMMARY,
    "description": FieldKind.DESCRIPTION,
    "keyword1": FieldKind.KEYWORD,
    "keyword2": FieldKind.KEYWORD,
    "keyword3": FieldKind.KEYWORD,
}

# Champ de la fiche -> interrupteur de configuration
FIELD_TOGGLES: Dict[str, str] = {
    "summary": "summary",
    "description": "description",
    "keyword1": "keywords",
    "keyword2": "keywords",
    "keyword3": "keywords",
}


def build_profiles(limits: FieldLimits) -> Dict[FieldKind, FieldProfile]:
    return {
        FieldKind.SUMMARY: FieldProfile(
            prompt_template=prompts.SUMMARY_PROMPT,
            system_persona=prompts.SUMMARY_PERSONA,
            max_output_tokens=limits.summary_max_tokens,
            max_chars=limits.summary_max_chars,
            plain_text_only=True,
        ),
        FieldKind.DESCRIPTION: FieldProfile(
            prompt_template=prompts.DESCRIPTION_PROMPT,
            system_persona=prompts.DESCRIPTION_PERSONA,
            max_output_tokens=limits.description_max_tokens,
            max_chars=None,
            plain_text_only=False,
        ),
        FieldKind.KEYWORD: FieldProfile(
            prompt_template=prompts.KEYWORD_PROMPT,
            system_persona=prompts.KEYWORD_PERSONA,
            max_output_tokens=limits.keyword_max_tokens,
            max_chars=limits.keyword_max_chars,
            plain_text_only=True,
        ),
    }


class FieldPolicy:
    """Décide quels champs traduire et avec quel profil."""

    def __init__(
        self,
        toggles: Optional[FieldToggles] = None,
        limits: Optional[FieldLimits] = None,
    ) -> None:
        self.toggles = toggles or FieldToggles()
        self.profiles = build_profiles(limits or FieldLimits())

    def profile(self, kind: FieldKind) -> FieldProfile:
        return self.profiles[kind]

    def should_translate(self, field_name: str) -> bool:
        """Indique si le champ (``summary``, ``keyword2``, ``keywords``...) est activé."""
        toggle = FIELD_TOGGLES.get(field_name, field_name)
        return getattr(self.toggles, toggle, False) is True

    def enabled_fields(self) -> List[str]:
        """Champs de la fiche activés par la configuration, dans l'ordre canonique."""
        return [name for name in CONTENT_FIELDS if self.should_translate(name)]

    def fields_to_translate(self, content: SourceContent) -> List[str]:
        """Champs qui nécessitent un appel au LLM pour ce contenu.

        Un mot-clé vide n'est jamais envoyé : sa valeur vide est conservée.
        """
        return [name for name in self.enabled_fields() if getattr(content, name).strip()]
