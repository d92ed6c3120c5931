"""Tests de la saisie des traductions dans la console."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from listing_translator.cache import TranslationCache
from listing_translator.errors import FieldNotFound
from listing_translator.models import FieldToggles, RunConfig, TranslationRecord, ValidationConfig
from listing_translator.ui import SAVE_CONFIRMATION, SAVE_TIMEOUT_FALLBACK, InMemoryListingUI
from listing_translator.updater import ListingUpdater


class SlowSaveUI(InMemoryListingUI):
    async def save(self):
        await asyncio.sleep(1)
        return await super().save()


@pytest.fixture
def cache():
    cache = TranslationCache()
    cache.put(
        "fr-FR",
        TranslationRecord(
            language_code="fr-FR",
            summary="Bonjour",
            description="<p>Salut</p>",
            keyword1="synchro",
        ),
    )
    cache.put("de-DE", TranslationRecord(language_code="de-DE", summary="Hallo", description="<p>Hallo</p>"))
    return cache


@pytest.mark.asyncio
async def test_apply_saves_cached_fields(cache):
    ui = InMemoryListingUI()
    updater = ListingUpdater(ui, cache)

    results = await updater.apply_languages(["fr-FR", "de-DE"])

    assert [result.status for result in results] == ["applied", "applied"]
    assert results[0].confirmation == SAVE_CONFIRMATION
    assert ui.saved["French"]["summary"] == "Bonjour"
    assert ui.saved["French"]["keyword1"] == "synchro"
    assert ui.saved["German"]["description"] == "<p>Hallo</p>"


@pytest.mark.asyncio
async def test_apply_skips_language_without_translation(cache):
    ui = InMemoryListingUI()

    results = await ListingUpdater(ui, cache).apply_languages(["es-ES", "fr-FR"])

    assert results[0].status == "skipped"
    assert "es-ES" in results[0].error
    assert "Spanish" not in ui.saved
    assert results[1].status == "applied"


@pytest.mark.asyncio
async def test_apply_skips_language_missing_from_page(cache):
    ui = InMemoryListingUI(language_names=["French"])

    results = await ListingUpdater(ui, cache).apply_languages(["de-DE", "fr-FR"])

    assert results[0].status == "skipped"
    assert "Language 'German' not found" in results[0].error
    assert results[1].status == "applied"


@pytest.mark.asyncio
async def test_apply_only_enabled_fields(cache):
    ui = InMemoryListingUI()
    ui.apply_fields = AsyncMock()
    config = RunConfig(field_toggles=FieldToggles(description=False))

    await ListingUpdater(ui, cache).apply_languages(["fr-FR"], config)

    values = ui.apply_fields.await_args.args[0]
    assert values == {"summary": "Bonjour", "keyword1": "synchro", "keyword2": "", "keyword3": ""}


@pytest.mark.asyncio
async def test_save_timeout_uses_fallback_confirmation(cache):
    ui = SlowSaveUI()
    config = RunConfig(save_timeout_ms=10)

    results = await ListingUpdater(ui, cache).apply_languages(["fr-FR"], config)

    assert results[0].status == "applied"
    assert results[0].confirmation == SAVE_TIMEOUT_FALLBACK


@pytest.mark.asyncio
async def test_ui_error_marks_language_failed(cache):
    ui = InMemoryListingUI()
    ui.apply_fields = AsyncMock(side_effect=FieldNotFound("description"))

    results = await ListingUpdater(ui, cache).apply_languages(["fr-FR", "de-DE"])

    assert [result.status for result in results] == ["failed", "failed"]
    assert "Field 'description' not found" in results[0].error


@pytest.mark.asyncio
async def test_run_update_validates_applied_languages(cache):
    ui = InMemoryListingUI(language_names=["French"])

    report = await ListingUpdater(ui, cache).run_update(["fr-FR", "de-DE"])

    assert [result.status for result in report.applied] == ["applied", "skipped"]
    assert [result.language_code for result in report.validation] == ["fr-FR"]
    assert report.validation[0].success is True
    assert report.validation_summary.passed == 1


@pytest.mark.asyncio
async def test_run_update_without_validation(cache):
    ui = InMemoryListingUI()
    config = RunConfig(validation=ValidationConfig(enabled=False))

    report = await ListingUpdater(ui, cache).run_update(["fr-FR"], config)

    assert report.applied[0].status == "applied"
    assert report.validation == []
    assert report.validation_summary is None


@pytest.mark.asyncio
async def test_source_language_applied_without_batch(store, content):
    store.set_current_content(content)
    ui = InMemoryListingUI()

    report = await ListingUpdater(ui, TranslationCache(store)).run_update(["en-US"])

    assert report.applied[0].status == "applied"
    assert ui.saved["English"]["summary"] == "Hello world"
    assert ui.saved["English"]["keyword2"] == "backup"
    assert report.validation[0].success is True


@pytest.mark.asyncio
async def test_unexpected_ui_exception_marks_language_failed(cache):
    ui = InMemoryListingUI()
    ui.save = AsyncMock(side_effect=RuntimeError("browser crashed"))

    results = await ListingUpdater(ui, cache).apply_languages(["fr-FR", "de-DE"])

    assert [result.status for result in results] == ["failed", "failed"]
    assert "browser crashed" in results[0].error
