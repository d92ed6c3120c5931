"""
Orchestration d'un lot de traduction.

Pour chaque langue demandée :
- en-US : copie du contenu source, mise en cache, succès
- entrée déjà en cache (sans ``force``) : réutilisée, aucun appel au LLM
- sinon : traduction concurrente des champs activés, puis une seule écriture
  dans le cache si tous les champs ont abouti

Un échec n'interrompt jamais le lot : la langue est marquée en échec, le cache
conserve sa valeur précédente et on passe à la suivante.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from listing_translator.cache import TranslationCache
from listing_translator.config import settings
from listing_translator.errors import MissingContent, TranslationFailure
from listing_translator.fields import FIELD_KINDS, FieldPolicy
from listing_translator.languages import SUPPORTED_LANGUAGES, resolve_language
from listing_translator.models import (
    CONTENT_FIELDS,
    BatchItemResult,
    Language,
    RunConfig,
    SourceContent,
    TranslationRecord,
)
from listing_translator.translator import ListingTranslator

logger = logging.getLogger(__name__)


def unique_codes(language_codes: Iterable[str]) -> List[str]:
    """Supprime les doublons et les codes vides en conservant l'ordre."""
    seen = set()
    codes: List[str] = []
    for code in language_codes:
        code = (code or "").strip()
        if code and code not in seen:
            seen.add(code)
            codes.append(code)
    return codes


class BatchOrchestrator:
    """Traduit une liste de langues et alimente le cache."""

    def __init__(
        self,
        translator: ListingTranslator,
        cache: TranslationCache,
        languages: Optional[List[Language]] = None,
        source_language: str = settings.SOURCE_LANGUAGE,
    ) -> None:
        self.translator = translator
        self.cache = cache
        self.languages = languages if languages is not None else SUPPORTED_LANGUAGES
        self.source_language = source_language

    async def run_batch(
        self,
        language_codes: Iterable[str],
        content: Optional[SourceContent],
        config: Optional[RunConfig] = None,
        force: bool = False,
    ) -> List[BatchItemResult]:
        """
        Traduit chaque langue et retourne un résultat par langue, dans l'ordre.

        Args:
            language_codes: codes demandés (doublons ignorés)
            content: fiche source ; None lève ``MissingContent``
            config: configuration de l'exécution
            force: retraduire même si la langue est déjà en cache

        Raises:
            MissingContent: aucune fiche source, rien n'est traité
        """
        if content is None:
            raise MissingContent()

        config = config or RunConfig()
        policy = FieldPolicy(config.field_toggles, config.limits)
        codes = unique_codes(language_codes)

        if not codes:
            logger.info("No languages to translate")
            return []

        logger.info("Starting batch translation for %s languages: %s", len(codes), ", ".join(codes))

        if config.max_concurrent_languages <= 1:
            results = [await self._process_language(code, content, policy, force) for code in codes]
        else:
            semaphore = asyncio.Semaphore(config.max_concurrent_languages)

            async def run_one(code: str) -> BatchItemResult:
                async with semaphore:
                    return await self._process_language(code, content, policy, force)

            # gather conserve l'ordre des entrées
            results = list(await asyncio.gather(*(run_one(code) for code in codes)))

        success_count = sum(1 for result in results if result.success)
        failure_count = len(results) - success_count
        log = logger.warning if failure_count else logger.info
        log("Batch translation completed: %s successful, %s failed", success_count, failure_count)
        return results

    async def _process_language(
        self,
        code: str,
        content: SourceContent,
        policy: FieldPolicy,
        force: bool,
    ) -> BatchItemResult:
        language = resolve_language(code, self.languages)
        logger.info("Translating %s (%s)...", language.name, code)

        if code == self.source_language:
            record = TranslationRecord.from_content(code, content)
            # écriture SQLite bloquante, hors de la boucle
            await asyncio.to_thread(self.cache.put, code, record)
            logger.info("%s: using original English content", code)
            return BatchItemResult.from_record(record)

        if not force:
            cached = self.cache.get(code)
            if cached is not None:
                logger.info("%s: using cached translation", code)
                return BatchItemResult.from_record(cached, cached=True)

        try:
            record = await self.translate_language(language, content, policy)
        except TranslationFailure as exc:
            logger.error("%s: translation failed - %s", code, exc)
            return BatchItemResult(language_code=code, success=False, error=str(exc))

        await asyncio.to_thread(self.cache.put, code, record)
        logger.info("%s: translation completed and cached", code)
        return BatchItemResult.from_record(record)

    async def translate_language(
        self,
        language: Language,
        content: SourceContent,
        policy: FieldPolicy,
    ) -> TranslationRecord:
        """
        Traduit tous les champs activés d'une langue, en parallèle.

        Le brouillon reste local : l'enregistrement n'est construit qu'une fois
        tous les champs résolus. Le premier échec (dans l'ordre des champs)
        est relevé sous forme de ``TranslationFailure``.
        """
        draft = {name: getattr(content, name) for name in CONTENT_FIELDS}
        names = policy.fields_to_translate(content)

        outcomes = await asyncio.gather(
            *(
                self.translator.translate(
                    draft[name],
                    language.name,
                    FIELD_KINDS[name],
                    language_code=language.code,
                    policy=policy,
                )
                for name in names
            ),
            return_exceptions=True,
        )

        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, TranslationFailure):
                raise outcome
            if isinstance(outcome, BaseException):
                raise TranslationFailure(language.code, FIELD_KINDS[name].value, outcome) from outcome
            draft[name] = outcome

        return TranslationRecord(language_code=language.code, **draft)
