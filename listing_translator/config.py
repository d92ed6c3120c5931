"""Configuration de l'outil de traduction de fiche produit."""
import os
from typing import List, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Paramètres de configuration de l'application."""

    # LLM (API compatible OpenAI)
    LLM_BASE_URL: str = os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
    LLM_API_KEY: str = os.getenv("LLM_API_KEY", os.getenv("OPENAI_API_KEY", ""))
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    LLM_TIMEOUT: int = int(os.getenv("LLM_TIMEOUT", "120"))

    # Proxy
    HTTP_PROXY: Optional[str] = os.getenv("HTTP_PROXY")
    HTTPS_PROXY: Optional[str] = os.getenv("HTTPS_PROXY")

    # Stockage
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "product_content.db")

    # Champs à mettre à jour
    UPDATE_SUMMARY: bool = _env_bool("UPDATE_SUMMARY", "true")
    UPDATE_DESCRIPTION: bool = _env_bool("UPDATE_DESCRIPTION", "true")
    UPDATE_KEYWORDS: bool = _env_bool("UPDATE_KEYWORDS", "true")

    # Filtre de langues
    LANGUAGE_FILTER_ENABLED: bool = _env_bool("LANGUAGE_FILTER_ENABLED", "false")
    LANGUAGE_INCLUDE: List[str] = _env_list("LANGUAGE_INCLUDE")
    LANGUAGE_EXCLUDE: List[str] = _env_list("LANGUAGE_EXCLUDE")

    # Validation
    VALIDATION_ENABLED: bool = _env_bool("VALIDATION_ENABLED", "true")
    VALIDATION_TIMEOUT_MS: int = int(os.getenv("VALIDATION_TIMEOUT_MS", "30000"))
    LENGTH_TOLERANCE: int = int(os.getenv("LENGTH_TOLERANCE", "5"))
    SAVE_TIMEOUT_MS: int = int(os.getenv("SAVE_TIMEOUT_MS", "20000"))

    # Console partenaire : "none" (pas de saisie) ou "memory" (mode à blanc)
    LISTING_UI_BACKEND: str = os.getenv("LISTING_UI_BACKEND", "none").lower()

    # Limites par champ
    SUMMARY_MAX_CHARS: int = int(os.getenv("SUMMARY_MAX_CHARS", "100"))
    KEYWORD_MAX_CHARS: int = int(os.getenv("KEYWORD_MAX_CHARS", "40"))
    SUMMARY_MAX_TOKENS: int = int(os.getenv("SUMMARY_MAX_TOKENS", "200"))
    KEYWORD_MAX_TOKENS: int = int(os.getenv("KEYWORD_MAX_TOKENS", "100"))
    DESCRIPTION_MAX_TOKENS: int = int(os.getenv("DESCRIPTION_MAX_TOKENS", "10000"))

    # Traduction
    MAX_CONCURRENT_LANGUAGES: int = int(os.getenv("MAX_CONCURRENT_LANGUAGES", "1"))

    # App
    DEBUG: bool = _env_bool("DEBUG", "false")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Langue source de la fiche (jamais traduite)
    SOURCE_LANGUAGE: str = "en-US"

    # Langues supportées par la console partenaire
    SUPPORTED_LANGUAGES: List[dict] = [
        {"code": "en-US", "name": "English"},
        {"code": "ar-SA", "name": "Arabic"},
        {"code": "bg-BG", "name": "Bulgarian"},
        {"code": "zh-CN", "name": "Chinese (Simplified)"},
        {"code": "zh-TW", "name": "Chinese (Traditional)"},
        {"code": "hr-HR", "name": "Croatian"},
        {"code": "cs-CZ", "name": "Czech"},
        {"code": "da-DK", "name": "Danish"},
        {"code": "nl-NL", "name": "Dutch"},
        {"code": "et-EE", "name": "Estonian"},
        {"code": "fi-FI", "name": "Finnish"},
        {"code": "fr-FR", "name": "French"},
        {"code": "de-DE", "name": "German"},
        {"code": "el-GR", "name": "Greek"},
        {"code": "he-IL", "name": "Hebrew"},
        {"code": "hu-HU", "name": "Hungarian"},
        {"code": "id-ID", "name": "Indonesian"},
        {"code": "it-IT", "name": "Italian"},
        {"code": "ja-JP", "name": "Japanese"},
        {"code": "ko-KR", "name": "Korean"},
        {"code": "lv-LV", "name": "Latvian"},
        {"code": "lt-LT", "name": "Lithuanian"},
        {"code": "nb-NO", "name": "Norwegian (Bokmål)"},
        {"code": "pl-PL", "name": "Polish"},
        {"code": "pt-BR", "name": "Portuguese (Brazil)"},
        {"code": "pt-PT", "name": "Portuguese (Portugal)"},
        {"code": "ro-RO", "name": "Romanian"},
        {"code": "ru-RU", "name": "Russian"},
        {"code": "sr-Latn-RS", "name": "Serbian (Latin)"},
        {"code": "sk-SK", "name": "Slovak"},
        {"code": "sl-SI", "name": "Slovenian"},
        {"code": "es-ES", "name": "Spanish"},
        {"code": "sv-SE", "name": "Swedish"},
        {"code": "th-TH", "name": "Thai"},
        {"code": "tr-TR", "name": "Turkish"},
        {"code": "uk-UA", "name": "Ukrainian"},
        {"code": "vi-VN", "name": "Vietnamese"},
    ]


settings = Settings()
