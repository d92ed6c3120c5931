"""
Stockage SQLite du contenu source et des traductions.

Deux tables :
- product_content : historique des fiches de référence (la plus récente fait foi)
- translations : une ligne par code de langue
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from listing_translator.errors import MissingContent
from listing_translator.models import CONTENT_FIELDS, ContentSnapshot, SourceContent, TranslationRecord

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS product_content (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    summary TEXT NOT NULL,
    description TEXT NOT NULL,
    keyword1 TEXT NOT NULL DEFAULT '',
    keyword2 TEXT NOT NULL DEFAULT '',
    keyword3 TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS translations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    language_code TEXT NOT NULL UNIQUE,
    summary TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    keyword1 TEXT NOT NULL DEFAULT '',
    keyword2 TEXT NOT NULL DEFAULT '',
    keyword3 TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL
);
"""


def _row_to_record(row: sqlite3.Row) -> TranslationRecord:
    return TranslationRecord(
        language_code=row["language_code"],
        timestamp=datetime.fromisoformat(row["updated_at"]),
        **{field: row[field] or "" for field in CONTENT_FIELDS},
    )


class ListingStore:
    """Magasin de contenu et de traductions adossé à un fichier SQLite."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = str(db_path)
        self.initialize()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def initialize(self) -> None:
        """Crée les tables si nécessaire."""
        with self._connect() as conn:
            conn.executescript(SCHEMA)
        logger.info("SQLite store ready at %s", self.db_path)

    # ============================================================
    # Contenu source
    # ============================================================

    def get_current_content(self) -> Optional[SourceContent]:
        """Retourne la fiche la plus récente, ou None."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM product_content ORDER BY id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        return SourceContent(
            name=row["name"],
            **{field: row[field] or "" for field in CONTENT_FIELDS},
        )

    def require_current_content(self) -> SourceContent:
        content = self.get_current_content()
        if content is None:
            raise MissingContent()
        return content

    def set_current_content(self, content: SourceContent) -> ContentSnapshot:
        """Enregistre une nouvelle fiche de référence (remplacement complet)."""
        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO product_content
                    (name, summary, description, keyword1, keyword2, keyword3, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    content.name,
                    content.summary,
                    content.description,
                    content.keyword1,
                    content.keyword2,
                    content.keyword3,
                    now.isoformat(),
                ),
            )
            content_id = cursor.lastrowid
        logger.info("Product content updated with id %s", content_id)
        return ContentSnapshot(id=content_id, timestamp=now)

    # ============================================================
    # Traductions
    # ============================================================

    def get_translation(self, language_code: str) -> Optional[TranslationRecord]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM translations WHERE language_code = ?", (language_code,)
            ).fetchone()
        return _row_to_record(row) if row else None

    def put_translation(self, language_code: str, record: TranslationRecord) -> None:
        """Insère ou remplace la ligne de la langue en une seule instruction."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO translations
                    (language_code, summary, description, keyword1, keyword2, keyword3, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    language_code,
                    record.summary,
                    record.description,
                    record.keyword1,
                    record.keyword2,
                    record.keyword3,
                    record.timestamp.isoformat(),
                ),
            )
        logger.debug("Translation stored for %s", language_code)

    def get_all(self) -> Dict[str, TranslationRecord]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM translations ORDER BY language_code").fetchall()
        return {row["language_code"]: _row_to_record(row) for row in rows}

    def delete_translation(self, language_code: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM translations WHERE language_code = ?", (language_code,))
            deleted = cursor.rowcount > 0
        logger.info("Translation deleted for %s: %s", language_code, deleted)
        return deleted

    def clear_all(self) -> int:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM translations")
            count = cursor.rowcount
        logger.info("All translations cleared (%s records deleted)", count)
        return count
