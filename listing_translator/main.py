"""Application FastAPI de pilotage des traductions de fiche produit."""
from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from listing_translator import activity
from listing_translator.config import settings
from listing_translator.errors import ListingError, MissingContent, UINotConfigured
from listing_translator.llm import LLMClient
from listing_translator.models import (
    ContentUpdateRequest,
    FieldTogglesUpdate,
    HealthResponse,
    LanguageCodesRequest,
    RunConfig,
    ValidationSummary,
)
from listing_translator.service import ListingService

# Configuration du logging structuré
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(message)s",
)

activity_log = activity.install(level=settings.LOG_LEVEL)


class StructuredLogger:
    """Logger avec sortie JSON structurée."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log(self, level: str, message: str, **kwargs) -> None:
        """Log un message avec métadonnées."""
        log_entry = {
            "timestamp": time.time(),
            "level": level,
            "message": message,
            **kwargs,
        }
        self.logger.log(getattr(logging, level), json.dumps(log_entry))


logger = StructuredLogger(__name__)


class Metrics:
    """Métriques simples pour suivre l'utilisation."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.batches = 0
        self.translations = 0
        self.failed_translations = 0
        self.validations = 0
        self.updates = 0

    def snapshot(self) -> dict[str, int]:
        """Retourne un instantané des métriques."""
        return {
            "batches": self.batches,
            "translations": self.translations,
            "failed_translations": self.failed_translations,
            "validations": self.validations,
            "updates": self.updates,
        }


metrics = Metrics()


@asynccontextmanager
async def lifespan(app: FastAPI):
    created = getattr(app.state, "service", None) is None
    if created:
        app.state.service = ListingService.from_settings()
    yield
    if created:
        await app.state.service.close()


# Initialisation FastAPI
app = FastAPI(
    title="Listing Translator",
    description="Traduction, mise en cache et validation des fiches produit de la console partenaire.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS minimal
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

# Configuration process-wide, remplacée en bloc (jamais modifiée sur place)
app.state.run_config = RunConfig.from_settings(settings)


def get_service(request: Request) -> ListingService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(503, "Service not initialised")
    return service


def get_run_config(request: Request) -> RunConfig:
    return request.app.state.run_config


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        message = str(error.get("msg", "Invalid request"))
        messages.append(message.removeprefix("Value error, "))
    return JSONResponse({"success": False, "error": "; ".join(messages)}, status_code=400)


@app.exception_handler(ListingError)
async def listing_error_handler(request: Request, exc: ListingError) -> JSONResponse:
    if isinstance(exc, MissingContent):
        status_code = 404
    elif isinstance(exc, UINotConfigured):
        status_code = 503
    else:
        status_code = 500
    logger.log("ERROR", "Request failed", path=request.url.path, code=exc.code, error=str(exc))
    return JSONResponse({"success": False, "error": str(exc), "code": exc.code}, status_code=status_code)


@app.get("/healthz")
async def health_check() -> HealthResponse:
    """Endpoint de healthcheck."""
    async with LLMClient() as client:
        llm_available = await client.check_health()

    status = "healthy" if llm_available else "degraded"
    return HealthResponse(
        status=status,
        llm_available=llm_available,
        llm_url=settings.LLM_BASE_URL,
    )


@app.get("/metrics")
async def get_metrics() -> dict[str, int]:
    """Retourne les métriques d'utilisation."""
    return metrics.snapshot()


# ============================================================================
# CONTENU SOURCE
# ============================================================================


@app.get("/api/content")
async def get_content(service: ListingService = Depends(get_service)) -> dict[str, object]:
    content = service.get_content()
    if content is None:
        raise MissingContent()
    return {"success": True, "data": content.model_dump()}


@app.post("/api/content")
async def update_content(
    payload: ContentUpdateRequest,
    service: ListingService = Depends(get_service),
) -> dict[str, object]:
    """Enregistre une nouvelle fiche anglaise de référence."""
    content = payload.to_content()
    snapshot = service.update_content(content)
    logger.log("INFO", "English content updated", content_id=snapshot.id)
    return {
        "success": True,
        "message": "Content updated successfully",
        "data": {**content.model_dump(), "timestamp": snapshot.timestamp.isoformat()},
    }


@app.get("/api/languages")
async def list_languages(
    service: ListingService = Depends(get_service),
    config: RunConfig = Depends(get_run_config),
) -> dict[str, object]:
    languages = service.list_languages(config)
    return {"success": True, "data": [language.model_dump() for language in languages]}


@app.get("/api/translation/{language_code}")
async def get_translation(
    language_code: str,
    service: ListingService = Depends(get_service),
) -> dict[str, object]:
    record = service.get_translation(language_code)
    if record is None:
        data = {
            "language_code": language_code,
            "summary": None,
            "description": None,
            "keyword1": None,
            "keyword2": None,
            "keyword3": None,
            "cached": False,
        }
    else:
        data = {**record.model_dump(mode="json"), "cached": True}
    return {"success": True, "data": data}


# ============================================================================
# TRADUCTION
# ============================================================================


@app.post("/api/translate/batch")
async def translate_batch(
    payload: LanguageCodesRequest,
    service: ListingService = Depends(get_service),
    config: RunConfig = Depends(get_run_config),
) -> dict[str, object]:
    """Traduit un lot de langues ; le résultat est détaillé par langue."""
    results = await service.run_batch(payload.language_codes, config, force=payload.force)

    succeeded = sum(1 for result in results if result.success)
    metrics.batches += 1
    metrics.translations += succeeded
    metrics.failed_translations += len(results) - succeeded
    logger.log(
        "INFO",
        "Batch translation completed",
        languages=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
    )
    return {"success": True, "data": [result.model_dump(mode="json") for result in results]}


@app.post("/api/translate/{language_code}")
async def translate_language(
    language_code: str,
    service: ListingService = Depends(get_service),
    config: RunConfig = Depends(get_run_config),
) -> dict[str, object]:
    """Retraduit une langue, même si elle est déjà en cache."""
    result = await service.translate_language(language_code, config)

    if not result.success:
        metrics.failed_translations += 1
        raise HTTPException(502, result.error or f"Failed to translate {language_code}")

    metrics.translations += 1
    logger.log("INFO", "Language translated", language_code=language_code)
    return {"success": True, "data": result.model_dump(mode="json")}


# ============================================================================
# CACHE ET CONFIGURATION
# ============================================================================


@app.get("/api/cache/status")
async def cache_status(service: ListingService = Depends(get_service)) -> dict[str, object]:
    return {"success": True, "data": service.get_cache_status().model_dump(mode="json")}


@app.delete("/api/cache")
async def clear_cache(service: ListingService = Depends(get_service)) -> dict[str, object]:
    deleted = service.clear_cache()
    logger.log("INFO", "Translation cache cleared", deleted=deleted)
    return {"success": True, "message": "Cache cleared successfully", "deleted": deleted}


@app.get("/api/config/fields")
async def get_field_config(config: RunConfig = Depends(get_run_config)) -> dict[str, object]:
    return {"success": True, "data": config.field_toggles.model_dump()}


@app.post("/api/config/fields")
async def update_field_config(payload: FieldTogglesUpdate, request: Request) -> dict[str, object]:
    """Remplace la configuration des champs à mettre à jour."""
    current: RunConfig = request.app.state.run_config
    toggles = payload.to_toggles()
    request.app.state.run_config = current.model_copy(update={"field_toggles": toggles})
    logger.log("INFO", "Field configuration updated", **toggles.model_dump())
    return {
        "success": True,
        "message": "Field configuration updated successfully",
        "data": toggles.model_dump(),
    }


@app.get("/api/console/logs")
async def console_logs() -> dict[str, object]:
    return {"success": True, "data": activity_log.entries()}


# ============================================================================
# CONSOLE PARTENAIRE
# ============================================================================


@app.post("/api/execute/update")
async def execute_update(
    payload: LanguageCodesRequest,
    service: ListingService = Depends(get_service),
    config: RunConfig = Depends(get_run_config),
) -> dict[str, object]:
    """Saisit les traductions en cache dans la console puis les valide."""
    report = await service.run_update(payload.language_codes, config)

    metrics.updates += 1
    if report.validation:
        metrics.validations += 1
    logger.log(
        "INFO",
        "Listing update completed",
        applied=sum(1 for result in report.applied if result.status == "applied"),
        validated=len(report.validation),
    )
    return {"success": True, "data": report.model_dump(mode="json")}


@app.post("/api/execute/validate")
async def execute_validate(
    payload: LanguageCodesRequest,
    service: ListingService = Depends(get_service),
    config: RunConfig = Depends(get_run_config),
) -> dict[str, object]:
    """Valide les champs enregistrés à partir du cache uniquement."""
    results = await service.run_validation(payload.language_codes, config)

    metrics.validations += 1
    summary = ValidationSummary.from_results(results)
    logger.log("INFO", "Validation completed", total=summary.total, passed=summary.passed)
    return {
        "success": True,
        "data": {
            "results": [result.model_dump(mode="json") for result in results],
            "summary": summary.model_dump(),
        },
    }


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
