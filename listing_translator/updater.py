"""Saisie des traductions en cache dans la console, suivie d'une validation."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from listing_translator.cache import TranslationCache
from listing_translator.errors import LanguageNotFound, UIError, UITimeout
from listing_translator.fields import FieldPolicy
from listing_translator.languages import SUPPORTED_LANGUAGES, resolve_language
from listing_translator.models import ApplyResult, Language, RunConfig, UpdateReport, ValidationSummary
from listing_translator.orchestrator import unique_codes
from listing_translator.ui import SAVE_TIMEOUT_FALLBACK, ListingUI, call_with_timeout
from listing_translator.validation import ValidationEngine

logger = logging.getLogger(__name__)


class ListingUpdater:
    """Applique les traductions du cache langue par langue via ``ListingUI``."""

    def __init__(
        self,
        ui: ListingUI,
        cache: TranslationCache,
        validation_engine: Optional[ValidationEngine] = None,
        languages: Optional[List[Language]] = None,
    ) -> None:
        self.ui = ui
        self.cache = cache
        self.languages = languages if languages is not None else SUPPORTED_LANGUAGES
        self.validation_engine = validation_engine or ValidationEngine(cache, ui, self.languages)

    async def apply_languages(
        self,
        language_codes: Iterable[str],
        config: Optional[RunConfig] = None,
    ) -> List[ApplyResult]:
        config = config or RunConfig()
        codes = unique_codes(language_codes)
        logger.info("Applying cached translations for %s languages", len(codes))

        results = []
        for code in codes:
            results.append(await self.apply_language(code, config))

        applied = sum(1 for result in results if result.status == "applied")
        skipped = sum(1 for result in results if result.status == "skipped")
        logger.info(
            "Apply completed: %s applied, %s skipped, %s failed",
            applied, skipped, len(results) - applied - skipped,
        )
        return results

    async def apply_language(self, language_code: str, config: RunConfig) -> ApplyResult:
        """
        Saisit une langue : sélection, remplissage des champs activés,
        enregistrement.

        Une langue absente du cache ou de la page est ignorée (``skipped``),
        ce qui est distinct d'un échec de la console (``failed``).
        """
        language = resolve_language(language_code, self.languages)
        record = self.cache.get(language_code)
        if record is None:
            logger.warning("No translation found for %s, skipping", language_code)
            return ApplyResult(
                language_code=language_code,
                language_name=language.name,
                status="skipped",
                error=f"No cached translation for {language_code}",
            )

        values = {name: getattr(record, name) for name in FieldPolicy(config.field_toggles).enabled_fields()}
        timeout_ms = config.validation.timeout_ms

        try:
            await call_with_timeout(self.ui.navigate_back_to_listing_root(), timeout_ms, "navigate back")
            found = await call_with_timeout(self.ui.select_language(language.name), timeout_ms, "select language")
            if not found:
                error = LanguageNotFound(language.name)
                logger.warning("%s, skipping", error)
                return ApplyResult(
                    language_code=language_code,
                    language_name=language.name,
                    status="skipped",
                    error=str(error),
                )

            if values:
                await call_with_timeout(self.ui.apply_fields(values), timeout_ms, "apply fields")
            else:
                logger.info("%s: all field updates disabled, saving unchanged listing", language.name)

            try:
                confirmation = await call_with_timeout(self.ui.save(), config.save_timeout_ms, "save")
            except UITimeout:
                logger.warning("Save confirmation not received for %s, proceeding anyway", language.name)
                confirmation = SAVE_TIMEOUT_FALLBACK
        except UIError as exc:
            logger.error("Error applying %s: %s", language.name, exc)
            return ApplyResult(
                language_code=language_code,
                language_name=language.name,
                status="failed",
                error=str(exc),
            )

        logger.info("%s: saved (%s)", language.name, confirmation)
        return ApplyResult(
            language_code=language_code,
            language_name=language.name,
            status="applied",
            confirmation=confirmation,
        )

    async def run_update(
        self,
        language_codes: Iterable[str],
        config: Optional[RunConfig] = None,
    ) -> UpdateReport:
        """Saisie de toutes les langues puis validation de celles enregistrées."""
        config = config or RunConfig()
        applied = await self.apply_languages(language_codes, config)

        if not config.validation.enabled:
            logger.info("Validation disabled, skipping validation pass")
            return UpdateReport(applied=applied)

        to_validate = [result.language_code for result in applied if result.status == "applied"]
        if not to_validate:
            logger.info("No languages applied, nothing to validate")
            return UpdateReport(applied=applied, validation_summary=ValidationSummary.from_results([]))

        validation = await self.validation_engine.run_validation(to_validate, config)
        return UpdateReport(
            applied=applied,
            validation=validation,
            validation_summary=ValidationSummary.from_results(validation),
        )
