"""Façade applicative : assemble stockage, cache, traduction et console."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from listing_translator.cache import TranslationCache
from listing_translator.config import settings
from listing_translator.errors import UINotConfigured
from listing_translator.languages import SUPPORTED_LANGUAGES, active_languages
from listing_translator.llm import LLMClient
from listing_translator.models import (
    CONTENT_FIELDS,
    BatchItemResult,
    CacheStatus,
    ContentSnapshot,
    Language,
    RunConfig,
    SourceContent,
    TranslationRecord,
    UpdateReport,
    ValidationResult,
)
from listing_translator.orchestrator import BatchOrchestrator
from listing_translator.store import ListingStore
from listing_translator.translator import ListingTranslator
from listing_translator.ui import InMemoryListingUI, ListingUI
from listing_translator.updater import ListingUpdater
from listing_translator.validation import ValidationEngine

logger = logging.getLogger(__name__)


class ListingService:
    """Point d'entrée unique utilisé par l'API HTTP."""

    def __init__(
        self,
        store: ListingStore,
        translator: ListingTranslator,
        cache: Optional[TranslationCache] = None,
        ui: Optional[ListingUI] = None,
        languages: Optional[List[Language]] = None,
    ) -> None:
        self.store = store
        self.translator = translator
        self.cache = cache if cache is not None else TranslationCache(store)
        self.languages = languages if languages is not None else SUPPORTED_LANGUAGES
        self.ui = ui
        self.orchestrator = BatchOrchestrator(translator, self.cache, self.languages)

        self.validation_engine: Optional[ValidationEngine] = None
        self.updater: Optional[ListingUpdater] = None
        if ui is not None:
            self.validation_engine = ValidationEngine(self.cache, ui, self.languages)
            self.updater = ListingUpdater(ui, self.cache, self.validation_engine, self.languages)

    @classmethod
    def from_settings(cls) -> "ListingService":
        """Construit le service à partir de la configuration d'environnement."""
        store = ListingStore(settings.DATABASE_PATH)
        translator = ListingTranslator(LLMClient())

        ui: Optional[ListingUI] = None
        if settings.LISTING_UI_BACKEND == "memory":
            ui = InMemoryListingUI(language.name for language in SUPPORTED_LANGUAGES)
            logger.info("Using in-memory listing UI (dry run)")
        elif settings.LISTING_UI_BACKEND != "none":
            logger.warning("Unknown listing UI backend %s, UI operations disabled", settings.LISTING_UI_BACKEND)

        return cls(store, translator, ui=ui)

    async def close(self) -> None:
        await self.translator.llm.close()

    # --- Contenu source -----------------------------------------------------

    def get_content(self) -> Optional[SourceContent]:
        return self.store.get_current_content()

    def update_content(self, content: SourceContent) -> ContentSnapshot:
        """Enregistre la fiche, resynchronise en-US et invalide les traductions obsolètes."""
        previous = self.store.get_current_content()
        snapshot = self.store.set_current_content(content)
        changed = previous is not None and any(
            getattr(previous, name) != getattr(content, name) for name in CONTENT_FIELDS
        )
        self.cache.sync_source(content, drop_stale=changed)
        return snapshot

    # --- Langues et traductions ---------------------------------------------

    def list_languages(self, config: RunConfig) -> List[Language]:
        return active_languages(config.language_filter, self.languages)

    def get_translation(self, language_code: str) -> Optional[TranslationRecord]:
        return self.cache.get(language_code)

    async def run_batch(
        self,
        language_codes: Iterable[str],
        config: RunConfig,
        force: bool = False,
    ) -> List[BatchItemResult]:
        content = self.store.require_current_content()
        return await self.orchestrator.run_batch(language_codes, content, config, force=force)

    async def translate_language(self, language_code: str, config: RunConfig) -> BatchItemResult:
        """Retraduit une seule langue, même si elle est déjà en cache."""
        results = await self.run_batch([language_code], config, force=True)
        return results[0]

    # --- Console partenaire -------------------------------------------------

    async def run_validation(self, language_codes: Iterable[str], config: RunConfig) -> List[ValidationResult]:
        if self.validation_engine is None:
            raise UINotConfigured()
        return await self.validation_engine.run_validation(language_codes, config)

    async def run_update(self, language_codes: Iterable[str], config: RunConfig) -> UpdateReport:
        if self.updater is None:
            raise UINotConfigured()
        return await self.updater.run_update(language_codes, config)

    # --- Cache ----------------------------------------------------------------

    def get_cache_status(self) -> CacheStatus:
        return self.cache.status()

    def clear_cache(self) -> int:
        return self.cache.clear()
