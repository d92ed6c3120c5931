"""
Validation des champs enregistrés dans la console.

On compare des longueurs, pas des contenus : la console peut normaliser le
texte (entités HTML, espaces). Un champ est valide si l'écart entre la
longueur enregistrée et la longueur attendue (issue du cache) ne dépasse pas
la tolérance. Les valeurs attendues viennent exclusivement du cache : aucune
traduction n'est relancée ici et le cache n'est jamais modifié.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from listing_translator.cache import TranslationCache
from listing_translator.errors import FieldNotFound, LanguageNotFound, MissingCacheEntry, UIError
from listing_translator.fields import FieldPolicy
from listing_translator.languages import SUPPORTED_LANGUAGES, resolve_language
from listing_translator.models import Language, RunConfig, TranslationRecord, ValidationResult, ValidationSummary
from listing_translator.orchestrator import unique_codes
from listing_translator.ui import ListingUI, call_with_timeout

logger = logging.getLogger(__name__)

KEYWORD_FIELDS = ("keyword1", "keyword2", "keyword3")

FIELD_LABELS = {
    "summary": "Summary",
    "description": "Description",
    "keyword1": "Keyword 1",
    "keyword2": "Keyword 2",
    "keyword3": "Keyword 3",
}


def compare_lengths(current_length: int, expected_length: int, tolerance: int) -> Tuple[bool, int]:
    """Retourne (valide, écart absolu)."""
    difference = abs(current_length - expected_length)
    return difference <= tolerance, difference


class ValidationEngine:
    """Vérifie, langue par langue, que la console contient les traductions du cache."""

    def __init__(
        self,
        cache: TranslationCache,
        ui: ListingUI,
        languages: Optional[List[Language]] = None,
    ) -> None:
        self.cache = cache
        self.ui = ui
        self.languages = languages if languages is not None else SUPPORTED_LANGUAGES

    async def run_validation(
        self,
        language_codes: Iterable[str],
        config: Optional[RunConfig] = None,
    ) -> List[ValidationResult]:
        """
        Valide chaque langue dans l'ordre, puis retente une fois les échecs.

        Les langues sont traitées l'une après l'autre : la console ne montre
        qu'une langue à la fois. Un résultat en échec est remplacé par celui
        de la nouvelle tentative si elle réussit.
        """
        config = config or RunConfig()
        codes = unique_codes(language_codes)
        logger.info("Starting validation for %s languages (cached translations only)", len(codes))

        results: List[ValidationResult] = []
        for code in codes:
            results.append(await self.validate_language(code, config))

        # Une entrée absente du cache ne se corrigera pas en réessayant
        retry_indexes = [
            index
            for index, result in enumerate(results)
            if not result.success and self.cache.has(result.language_code)
        ]
        if retry_indexes:
            logger.info("Retrying %s failed validations", len(retry_indexes))

        for index in retry_indexes:
            previous = results[index]
            logger.info("Retrying validation for %s", previous.language_name)
            retried = await self.validate_language(previous.language_code, config)
            if retried.success:
                logger.info("%s: validation PASSED on retry", previous.language_name)
                results[index] = retried.model_copy(update={"retried": True})
            else:
                logger.warning("%s: validation still FAILED after retry - %s", previous.language_name, retried.error)
                results[index] = previous.model_copy(update={"retried": True})

        self.summarize(results)
        return results

    async def validate_language(self, language_code: str, config: RunConfig) -> ValidationResult:
        """Valide une langue ; les erreurs UI deviennent un résultat en échec."""
        language = resolve_language(language_code, self.languages)
        logger.info("Validating %s (%s)...", language.name, language_code)

        expected = self.cache.get(language_code)
        if expected is None:
            error = MissingCacheEntry(language_code)
            logger.error("%s", error)
            return ValidationResult(
                language_code=language_code,
                language_name=language.name,
                success=False,
                error=str(error),
            )

        fields = FieldPolicy(config.field_toggles).enabled_fields()
        timeout_ms = config.validation.timeout_ms

        try:
            await call_with_timeout(self.ui.navigate_back_to_listing_root(), timeout_ms, "navigate back")
            found = await call_with_timeout(self.ui.select_language(language.name), timeout_ms, "select language")
            if not found:
                raise LanguageNotFound(language.name)
            current = await call_with_timeout(self.ui.read_current_fields(), timeout_ms, "read fields")
            for name in fields:
                if name not in current:
                    raise FieldNotFound(name)
        except UIError as exc:
            logger.error("Error validating %s: %s", language.name, exc)
            return ValidationResult(
                language_code=language_code,
                language_name=language.name,
                success=False,
                error=f"Validation failed: {exc}",
            )

        result = self.check_lengths(language, expected, current, fields, config.length_tolerance)
        if result.success:
            logger.info("%s: validation PASSED", language.name)
        else:
            logger.warning("%s: validation FAILED - %s", language.name, result.error)
        return result

    def check_lengths(
        self,
        language: Language,
        expected: TranslationRecord,
        current: Dict[str, Optional[str]],
        fields: List[str],
        tolerance: int,
    ) -> ValidationResult:
        """Compare les longueurs (après ``strip``) champ par champ."""
        current_lengths: Dict[str, int] = {}
        expected_lengths: Dict[str, int] = {}
        validity: Dict[str, bool] = {}
        mismatches: List[str] = []

        for name in fields:
            current_lengths[name] = len((current.get(name) or "").strip())
            expected_lengths[name] = len(getattr(expected, name).strip())
            valid, difference = compare_lengths(current_lengths[name], expected_lengths[name], tolerance)
            validity[name] = valid
            if not valid:
                logger.debug(
                    "%s %s length difference %s exceeds tolerance %s",
                    language.name, name, difference, tolerance,
                )
                mismatches.append(
                    f"{FIELD_LABELS[name]} length mismatch for {language.name} "
                    f"({current_lengths[name]} vs {expected_lengths[name]})"
                )

        keyword_checks = [validity[name] for name in KEYWORD_FIELDS if name in validity]

        return ValidationResult(
            language_code=language.code,
            language_name=language.name,
            success=not mismatches,
            summary_valid=validity.get("summary"),
            description_valid=validity.get("description"),
            keywords_valid=all(keyword_checks) if keyword_checks else None,
            current_lengths=current_lengths,
            expected_lengths=expected_lengths,
            error=" and ".join(mismatches) or None,
        )

    @staticmethod
    def summarize(results: List[ValidationResult]) -> ValidationSummary:
        summary = ValidationSummary.from_results(results)
        logger.info(
            "Validation report: %s total, %s passed, %s failed",
            summary.total, summary.passed, summary.failed,
        )
        for result in results:
            if not result.success:
                logger.info("  - %s (%s): %s", result.language_name, result.language_code, result.error)
        return summary
