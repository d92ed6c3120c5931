"""Liste des langues supportées et filtre include/exclude."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from listing_translator.config import settings
from listing_translator.models import Language, LanguageFilterConfig

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES: List[Language] = [Language(**entry) for entry in settings.SUPPORTED_LANGUAGES]


def filter_languages(
    languages: List[Language],
    enabled: bool,
    include: Iterable[str] = (),
    exclude: Iterable[str] = (),
) -> List[Language]:
    """
    Réduit la liste complète aux langues actives.

    Sans filtre, la liste est renvoyée telle quelle. Avec filtre, on ne garde
    que les codes de ``include`` (s'il n'est pas vide) puis on retire ceux de
    ``exclude``. L'ordre d'origine est toujours conservé et un résultat vide
    n'est pas une erreur.
    """
    if not enabled:
        return list(languages)

    include_set = set(include)
    exclude_set = set(exclude)

    filtered = list(languages)
    if include_set:
        filtered = [lang for lang in filtered if lang.code in include_set]
    if exclude_set:
        filtered = [lang for lang in filtered if lang.code not in exclude_set]

    logger.debug("Language filter kept %s of %s languages", len(filtered), len(languages))
    return filtered


def active_languages(
    config: LanguageFilterConfig,
    languages: Optional[List[Language]] = None,
) -> List[Language]:
    """Applique la configuration de filtre à la liste supportée."""
    return filter_languages(
        SUPPORTED_LANGUAGES if languages is None else languages,
        config.enabled,
        config.include,
        config.exclude,
    )


def get_language_name(code: str, languages: Optional[List[Language]] = None) -> Optional[str]:
    """Nom affiché pour un code de langue, ou None si inconnu."""
    for language in SUPPORTED_LANGUAGES if languages is None else languages:
        if language.code == code:
            return language.name
    return None


def resolve_language(code: str, languages: Optional[List[Language]] = None) -> Language:
    """Retourne la langue correspondant au code (le code sert de nom si inconnu)."""
    name = get_language_name(code, languages)
    if name is None:
        logger.warning("Unknown language code %s, using the code as display name", code)
        name = code
    return Language(code=code, name=name)
