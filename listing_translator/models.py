"""Modèles Pydantic pour validation des données."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

CONTENT_FIELDS = ("summary", "description", "keyword1", "keyword2", "keyword3")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Language(BaseModel):
    """Langue proposée par la console partenaire."""
    model_config = ConfigDict(frozen=True)

    code: str
    name: str


class SourceContent(BaseModel):
    """Fiche produit de référence en anglais."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    summary: str
    description: str
    keyword1: str = ""
    keyword2: str = ""
    keyword3: str = ""


class ContentSnapshot(BaseModel):
    """Ligne créée lors d'une mise à jour du contenu source."""
    id: int
    timestamp: datetime


class TranslationRecord(BaseModel):
    """Jeu de champs traduits pour une langue (entrée du cache)."""
    model_config = ConfigDict(frozen=True)

    language_code: str
    summary: str
    description: str
    keyword1: str = ""
    keyword2: str = ""
    keyword3: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_content(cls, language_code: str, content: SourceContent) -> "TranslationRecord":
        """Construit un enregistrement identique au contenu source."""
        return cls(
            language_code=language_code,
            **{name: getattr(content, name) for name in CONTENT_FIELDS},
        )

    def field_values(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in CONTENT_FIELDS}


class BatchItemResult(BaseModel):
    """Résultat d'une langue dans un lot de traduction."""
    language_code: str
    success: bool
    summary: Optional[str] = None
    description: Optional[str] = None
    keyword1: Optional[str] = None
    keyword2: Optional[str] = None
    keyword3: Optional[str] = None
    cached: bool = False
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_record(cls, record: TranslationRecord, cached: bool = False) -> "BatchItemResult":
        return cls(
            language_code=record.language_code,
            success=True,
            cached=cached,
            timestamp=record.timestamp,
            **record.field_values(),
        )


class ValidationResult(BaseModel):
    """Résultat de la validation des longueurs pour une langue."""
    language_code: str
    language_name: str
    success: bool
    summary_valid: Optional[bool] = None
    description_valid: Optional[bool] = None
    keywords_valid: Optional[bool] = None
    current_lengths: Dict[str, int] = Field(default_factory=dict)
    expected_lengths: Dict[str, int] = Field(default_factory=dict)
    error: Optional[str] = None
    retried: bool = False

    @property
    def length_differences(self) -> Dict[str, int]:
        return {
            name: abs(self.current_lengths[name] - expected)
            for name, expected in self.expected_lengths.items()
            if name in self.current_lengths
        }


class ValidationSummary(BaseModel):
    total: int
    passed: int
    failed: int

    @classmethod
    def from_results(cls, results: List[ValidationResult]) -> "ValidationSummary":
        passed = sum(1 for result in results if result.success)
        return cls(total=len(results), passed=passed, failed=len(results) - passed)


class ApplyResult(BaseModel):
    """Résultat de la saisie d'une langue dans la console."""
    language_code: str
    language_name: str
    status: Literal["applied", "skipped", "failed"]
    confirmation: Optional[str] = None
    error: Optional[str] = None


class UpdateReport(BaseModel):
    """Rapport complet d'une exécution saisie + validation."""
    applied: List[ApplyResult] = Field(default_factory=list)
    validation: List[ValidationResult] = Field(default_factory=list)
    validation_summary: Optional[ValidationSummary] = None


class CacheEntryStatus(BaseModel):
    language_code: str
    timestamp: datetime
    summary_length: int
    description_length: int
    keyword_lengths: List[int]


class CacheStatus(BaseModel):
    count: int
    codes: List[str]
    entries: List[CacheEntryStatus] = Field(default_factory=list)


# --- Configuration d'exécution ---------------------------------------------


class FieldToggles(BaseModel):
    """Champs à traduire et à saisir."""
    model_config = ConfigDict(frozen=True)

    summary: bool = True
    description: bool = True
    keywords: bool = True


class LanguageFilterConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    include: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)


class ValidationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    timeout_ms: int = Field(default=30_000, gt=0)


class FieldLimits(BaseModel):
    """Longueurs et budgets de tokens par type de champ."""
    model_config = ConfigDict(frozen=True)

    summary_max_chars: int = Field(default=100, ge=3)
    keyword_max_chars: int = Field(default=40, ge=3)
    summary_max_tokens: int = Field(default=200, gt=0)
    keyword_max_tokens: int = Field(default=100, gt=0)
    description_max_tokens: int = Field(default=10_000, gt=0)


class RunConfig(BaseModel):
    """Configuration figée transmise à chaque exécution."""
    model_config = ConfigDict(frozen=True)

    field_toggles: FieldToggles = Field(default_factory=FieldToggles)
    language_filter: LanguageFilterConfig = Field(default_factory=LanguageFilterConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    limits: FieldLimits = Field(default_factory=FieldLimits)
    length_tolerance: int = Field(default=5, ge=0)
    max_concurrent_languages: int = Field(default=1, ge=1)
    save_timeout_ms: int = Field(default=20_000, gt=0)

    @classmethod
    def from_settings(cls, settings) -> "RunConfig":
        return cls(
            field_toggles=FieldToggles(
                summary=settings.UPDATE_SUMMARY,
                description=settings.UPDATE_DESCRIPTION,
                keywords=settings.UPDATE_KEYWORDS,
            ),
            language_filter=LanguageFilterConfig(
                enabled=settings.LANGUAGE_FILTER_ENABLED,
                include=list(settings.LANGUAGE_INCLUDE),
                exclude=list(settings.LANGUAGE_EXCLUDE),
            ),
            validation=ValidationConfig(
                enabled=settings.VALIDATION_ENABLED,
                timeout_ms=settings.VALIDATION_TIMEOUT_MS,
            ),
            limits=FieldLimits(
                summary_max_chars=settings.SUMMARY_MAX_CHARS,
                keyword_max_chars=settings.KEYWORD_MAX_CHARS,
                summary_max_tokens=settings.SUMMARY_MAX_TOKENS,
                keyword_max_tokens=settings.KEYWORD_MAX_TOKENS,
                description_max_tokens=settings.DESCRIPTION_MAX_TOKENS,
            ),
            length_tolerance=settings.LENGTH_TOLERANCE,
            max_concurrent_languages=settings.MAX_CONCURRENT_LANGUAGES,
            save_timeout_ms=settings.SAVE_TIMEOUT_MS,
        )


# --- Requêtes / réponses HTTP ------------------------------------------------


class ContentUpdateRequest(BaseModel):
    """Nouvelle fiche produit de référence."""
    name: str
    summary: str
    description: str
    keyword1: str = ""
    keyword2: str = ""
    keyword3: str = ""

    @field_validator("name", "summary", "description")
    @classmethod
    def check_not_blank(cls, v):
        """Nom, résumé et description sont obligatoires."""
        if not v or not v.strip():
            raise ValueError("Product name, summary, and description are required")
        return v

    def to_content(self) -> SourceContent:
        return SourceContent(**self.model_dump())


class LanguageCodesRequest(BaseModel):
    language_codes: List[str] = Field(..., alias="languageCodes")
    force: bool = False

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("language_codes")
    @classmethod
    def check_codes(cls, v):
        """Supprime les codes vides."""
        cleaned = [code.strip() for code in v if isinstance(code, str) and code.strip()]
        if not cleaned:
            raise ValueError("At least one language code is required")
        return cleaned


class HealthResponse(BaseModel):
    """Réponse du healthcheck."""
    status: str
    llm_available: bool
    llm_url: str


class FieldTogglesUpdate(BaseModel):
    """Les trois interrupteurs sont obligatoires et strictement booléens."""
    summary: StrictBool
    description: StrictBool
    keywords: StrictBool

    def to_toggles(self) -> FieldToggles:
        return FieldToggles(**self.model_dump())
