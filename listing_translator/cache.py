"""
Cache des traductions, indexé par code de langue.

L'existence d'une entrée signifie « langue déjà traduite ». Les entrées sont
des ``TranslationRecord`` immuables, écrites en une seule fois : un lecteur ne
voit jamais une langue à moitié traduite.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from listing_translator.config import settings
from listing_translator.models import CacheEntryStatus, CacheStatus, SourceContent, TranslationRecord
from listing_translator.store import ListingStore

logger = logging.getLogger(__name__)


class TranslationCache:
    """Cache en mémoire, éventuellement persistant via un ``ListingStore``."""

    def __init__(
        self,
        store: Optional[ListingStore] = None,
        source_language: str = settings.SOURCE_LANGUAGE,
    ) -> None:
        self.store = store
        self.source_language = source_language
        self._entries: Dict[str, TranslationRecord] = {}
        # Toutes les écritures passent par ce verrou
        self._write_lock = threading.Lock()

        if store is not None:
            self._entries.update(store.get_all())
            logger.info("Translation cache warmed with %s entries", len(self._entries))
            content = store.get_current_content()
            if content is not None:
                self.sync_source(content)

    def has(self, language_code: str) -> bool:
        return language_code in self._entries

    def get(self, language_code: str) -> Optional[TranslationRecord]:
        return self._entries.get(language_code)

    def put(self, language_code: str, record: TranslationRecord) -> None:
        """Écrit l'enregistrement complet d'une langue (écrasement idempotent)."""
        if record.language_code != language_code:
            raise ValueError(
                f"Record for {record.language_code} cannot be stored under {language_code}"
            )
        with self._write_lock:
            if self.store is not None:
                self.store.put_translation(language_code, record)
            self._entries[language_code] = record
        logger.debug("Cached translation for %s", language_code)

    def delete(self, language_code: str) -> bool:
        with self._write_lock:
            if self.store is not None:
                self.store.delete_translation(language_code)
            return self._entries.pop(language_code, None) is not None

    def sync_source(self, content: SourceContent, drop_stale: bool = False) -> List[str]:
        """
        Réécrit l'entrée de la langue source à partir de la fiche courante.

        Avec ``drop_stale``, les traductions des autres langues, faites sur
        l'ancienne fiche, sont supprimées. Retourne les codes supprimés.
        """
        record = TranslationRecord.from_content(self.source_language, content)
        current = self.get(self.source_language)
        if current is None or current.field_values() != record.field_values():
            self.put(self.source_language, record)
            logger.info("Source language %s synced with current content", self.source_language)

        if not drop_stale:
            return []
        stale = [code for code in self.keys() if code != self.source_language]
        for code in stale:
            self.delete(code)
        if stale:
            logger.info("Dropped %s stale translations: %s", len(stale), ", ".join(stale))
        return stale

    def clear(self) -> int:
        """Vide le cache et retourne le nombre d'entrées supprimées."""
        with self._write_lock:
            count = len(self._entries)
            if self.store is not None:
                count = max(count, self.store.clear_all())
            self._entries.clear()
        logger.info("Translation cache cleared (%s entries)", count)
        return count

    def keys(self) -> List[str]:
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, language_code: object) -> bool:
        return language_code in self._entries

    def status(self) -> CacheStatus:
        """Résumé du cache : codes présents et longueurs par langue."""
        entries = [
            CacheEntryStatus(
                language_code=code,
                timestamp=record.timestamp,
                summary_length=len(record.summary),
                description_length=len(record.description),
                keyword_lengths=[len(record.keyword1), len(record.keyword2), len(record.keyword3)],
            )
            for code, record in sorted(self._entries.items())
        ]
        return CacheStatus(count=len(entries), codes=[entry.language_code for entry in entries], entries=entries)
