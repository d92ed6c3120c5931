"""
Frontière avec la console partenaire (saisie des champs dans le navigateur).

Le coeur ne connaît que l'interface ``ListingUI`` : l'automatisation réelle
du navigateur vit hors de ce paquet. ``InMemoryListingUI`` simule une console
(mode à blanc et tests).
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Dict, Iterable, Optional, TypeVar

from listing_translator.errors import FieldNotFound, UIError, UITimeout
from listing_translator.models import CONTENT_FIELDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

SAVE_CONFIRMATION = "Your changes were saved."
SAVE_TIMEOUT_FALLBACK = "Save completed (confirmation timeout)"


async def call_with_timeout(awaitable: Awaitable[T], timeout_ms: int, action: str) -> T:
    """
    Attend une opération UI.

    Un dépassement devient ``UITimeout`` ; toute autre exception levée par
    l'implémentation devient ``UIError``, pour que l'appelant la traite comme
    un échec ordinaire de la langue en cours.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as exc:
        raise UITimeout(f"UI operation '{action}' timed out after {timeout_ms}ms") from exc
    except UIError:
        raise
    except Exception as exc:
        logger.exception("Unexpected error during UI operation '%s'", action)
        raise UIError(f"UI operation '{action}' failed: {exc}") from exc


class ListingUI(ABC):
    """
    Une session unique sur la page de la fiche, une langue à la fois.

    Les implémentations signalent leurs échecs par des sous-classes de
    ``UIError`` ; les autres exceptions sont converties par
    ``call_with_timeout``.
    """

    @abstractmethod
    async def select_language(self, language_name: str) -> bool:
        """Ouvre la langue ; False si elle n'existe pas sur la page."""

    @abstractmethod
    async def apply_fields(self, values: Dict[str, str]) -> None:
        """Remplit les champs fournis (seulement les champs activés)."""

    @abstractmethod
    async def save(self) -> str:
        """Enregistre et retourne le texte de confirmation."""

    @abstractmethod
    async def read_current_fields(self) -> Dict[str, str]:
        """Valeurs actuellement enregistrées pour la langue ouverte."""

    @abstractmethod
    async def navigate_back_to_listing_root(self) -> None:
        """Revient à la liste des fiches."""


class InMemoryListingUI(ListingUI):
    """Console simulée : chaque langue garde ses derniers champs enregistrés."""

    def __init__(self, language_names: Optional[Iterable[str]] = None) -> None:
        self.language_names = set(language_names) if language_names is not None else None
        self.saved: Dict[str, Dict[str, str]] = {}
        self.current_language: Optional[str] = None
        self._pending: Dict[str, str] = {}

    async def select_language(self, language_name: str) -> bool:
        if self.language_names is not None and language_name not in self.language_names:
            logger.warning("Language %s not available on the simulated listing", language_name)
            return False
        self.current_language = language_name
        self._pending = dict(self.saved.get(language_name, {}))
        return True

    async def apply_fields(self, values: Dict[str, str]) -> None:
        if self.current_language is None:
            raise FieldNotFound(next(iter(values), "summary"))
        self._pending.update(values)

    async def save(self) -> str:
        if self.current_language is None:
            raise UITimeout("No language selected, nothing to save")
        self.saved[self.current_language] = dict(self._pending)
        return SAVE_CONFIRMATION

    async def read_current_fields(self) -> Dict[str, str]:
        if self.current_language is None:
            raise FieldNotFound("summary")
        saved = self.saved.get(self.current_language, {})
        return {name: saved.get(name, "") for name in CONTENT_FIELDS}

    async def navigate_back_to_listing_root(self) -> None:
        self.current_language = None
        self._pending = {}
