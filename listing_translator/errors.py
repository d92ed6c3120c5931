"""Exceptions métier de l'outil de traduction de fiche produit."""
from __future__ import annotations

from typing import Optional


class ListingError(Exception):
    """Erreur de base, avec un code court pour la couche HTTP."""

    code = "listing_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


# --- Service LLM -----------------------------------------------------------


class LLMError(ListingError):
    """Échec d'un appel au service LLM."""

    code = "llm_error"


class RateLimited(LLMError):
    code = "rate_limited"


class LLMTimeout(LLMError):
    code = "timeout"


class InvalidResponse(LLMError):
    code = "invalid_response"


class LLMUnavailable(LLMError):
    """Circuit breaker ouvert : l'appel n'a pas été tenté."""

    code = "unavailable"


# --- Coeur ------------------------------------------------------------------


class TranslationFailure(ListingError):
    """Traduction d'un champ impossible pour une langue donnée."""

    code = "translation_failure"

    def __init__(self, language_code: str, field_kind: str, cause: BaseException):
        super().__init__(
            f"Translation of {field_kind} to {language_code} failed: {cause}",
            details={"language_code": language_code, "field_kind": field_kind},
        )
        self.language_code = language_code
        self.field_kind = field_kind
        self.cause = cause


class MissingContent(ListingError):
    """Aucun contenu source n'a été enregistré."""

    code = "missing_content"

    def __init__(self, message: str = "No product content found. Please add content first."):
        super().__init__(message)


class MissingCacheEntry(ListingError):
    """Validation demandée pour une langue jamais traduite avec succès."""

    code = "missing_cache_entry"

    def __init__(self, language_code: str):
        super().__init__(
            f"No cached translation found for {language_code}. "
            "Validation should only use cached translations.",
            details={"language_code": language_code},
        )
        self.language_code = language_code


# --- Collaborateur UI -------------------------------------------------------


class UIError(ListingError):
    """Échec côté console partenaire."""

    code = "ui_error"


class LanguageNotFound(UIError):
    code = "language_not_found"

    def __init__(self, language_name: str):
        super().__init__(
            f"Language '{language_name}' not found on the listing page",
            details={"language": language_name},
        )
        self.language_name = language_name


class FieldNotFound(UIError):
    code = "field_not_found"

    def __init__(self, field_name: str):
        super().__init__(f"Field '{field_name}' not found on the listing page", details={"field": field_name})
        self.field_name = field_name


class UITimeout(UIError):
    code = "timeout"


class UINotConfigured(UIError):
    """Aucune console partenaire n'est branchée sur ce processus."""

    code = "ui_not_configured"

    def __init__(self, message: str = "No listing UI backend is configured"):
        super().__init__(message)
