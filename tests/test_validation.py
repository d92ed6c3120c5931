"""Tests de la validation des longueurs enregistrées dans la console."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from listing_translator.cache import TranslationCache
from listing_translator.models import FieldToggles, RunConfig, TranslationRecord, ValidationConfig, ValidationResult
from listing_translator.ui import InMemoryListingUI
from listing_translator.validation import ValidationEngine, compare_lengths


FRENCH = TranslationRecord(
    language_code="fr-FR",
    summary="s" * 100,
    description="d" * 300,
    keyword1="synchro",
    keyword2="sauvegarde",
)
GERMAN = TranslationRecord(language_code="de-DE", summary="Hallo", description="<p>Hallo</p>")


class FlakyUI(InMemoryListingUI):
    """Renvoie des valeurs obsolètes à la première lecture."""

    def __init__(self, stale, **kwargs):
        super().__init__(**kwargs)
        self.stale = stale
        self.reads = 0

    async def read_current_fields(self):
        self.reads += 1
        if self.reads == 1:
            return dict(self.stale)
        return await super().read_current_fields()


class SlowUI(InMemoryListingUI):
    async def read_current_fields(self):
        await asyncio.sleep(1)
        return await super().read_current_fields()


def _saved(ui, language_name, record, **overrides):
    values = record.field_values()
    values.update(overrides)
    ui.saved[language_name] = values


@pytest.fixture
def cache():
    cache = TranslationCache()
    cache.put("fr-FR", FRENCH)
    cache.put("de-DE", GERMAN)
    return cache


def test_compare_lengths_within_tolerance():
    assert compare_lengths(98, 100, 5) == (True, 2)


def test_compare_lengths_outside_tolerance():
    assert compare_lengths(90, 100, 5) == (False, 10)


def test_compare_lengths_boundary():
    assert compare_lengths(105, 100, 5) == (True, 5)
    assert compare_lengths(106, 100, 5) == (False, 6)


@pytest.mark.asyncio
async def test_validation_passes_with_small_differences(cache):
    ui = InMemoryListingUI()
    _saved(ui, "French", FRENCH, summary="s" * 98, description="  " + "d" * 300 + "\n")
    _saved(ui, "German", GERMAN)

    results = await ValidationEngine(cache, ui).run_validation(["fr-FR", "de-DE"])

    assert [result.language_code for result in results] == ["fr-FR", "de-DE"]
    french = results[0]
    assert french.success is True
    assert french.summary_valid is True
    assert french.description_valid is True
    assert french.keywords_valid is True
    assert french.current_lengths["summary"] == 98
    assert french.expected_lengths["summary"] == 100
    assert french.length_differences["summary"] == 2
    assert french.retried is False


@pytest.mark.asyncio
async def test_validation_reports_length_mismatch(cache):
    ui = InMemoryListingUI()
    _saved(ui, "French", FRENCH, summary="s" * 90)

    results = await ValidationEngine(cache, ui).run_validation(["fr-FR"])

    french = results[0]
    assert french.success is False
    assert french.summary_valid is False
    assert french.description_valid is True
    assert french.length_differences["summary"] == 10
    assert french.error == "Summary length mismatch for French (90 vs 100)"
    assert french.retried is True


@pytest.mark.asyncio
async def test_missing_cache_entry_is_reported_not_retried(cache):
    ui = InMemoryListingUI()
    _saved(ui, "French", FRENCH)

    results = await ValidationEngine(cache, ui).run_validation(["es-ES", "fr-FR"])

    spanish, french = results
    assert spanish.success is False
    assert "No cached translation found for es-ES" in spanish.error
    assert spanish.retried is False
    assert french.success is True


@pytest.mark.asyncio
async def test_language_not_found_is_a_failed_result(cache):
    ui = InMemoryListingUI(language_names=["French"])
    _saved(ui, "French", FRENCH)

    results = await ValidationEngine(cache, ui).run_validation(["de-DE", "fr-FR"])

    german, french = results
    assert german.success is False
    assert "Language 'German' not found" in german.error
    assert german.retried is True
    assert french.success is True


@pytest.mark.asyncio
async def test_retry_replaces_failed_result_on_success(cache):
    ui = FlakyUI(stale={"summary": "", "description": "", "keyword1": "", "keyword2": "", "keyword3": ""})
    _saved(ui, "French", FRENCH)

    results = await ValidationEngine(cache, ui).run_validation(["fr-FR"])

    assert ui.reads == 2
    assert results[0].success is True
    assert results[0].retried is True
    assert results[0].error is None


@pytest.mark.asyncio
async def test_missing_field_is_a_failed_result(cache):
    ui = InMemoryListingUI()
    _saved(ui, "French", FRENCH)
    ui.read_current_fields = _always({"summary": "s" * 100})

    results = await ValidationEngine(cache, ui).run_validation(["fr-FR"])

    assert results[0].success is False
    assert "Field 'description' not found" in results[0].error


def _always(values):
    async def read():
        return dict(values)
    return read


@pytest.mark.asyncio
async def test_ui_timeout_is_a_failed_result(cache):
    ui = SlowUI()
    _saved(ui, "French", FRENCH)
    config = RunConfig(validation=ValidationConfig(timeout_ms=10))

    results = await ValidationEngine(cache, ui).run_validation(["fr-FR"], config)

    assert results[0].success is False
    assert "timed out" in results[0].error
    assert results[0].retried is True


@pytest.mark.asyncio
async def test_only_enabled_fields_are_compared(cache):
    ui = InMemoryListingUI()
    _saved(ui, "French", FRENCH, keyword1="", description="")
    config = RunConfig(field_toggles=FieldToggles(description=False, keywords=False))

    results = await ValidationEngine(cache, ui).run_validation(["fr-FR"], config)

    french = results[0]
    assert french.success is True
    assert french.description_valid is None
    assert french.keywords_valid is None
    assert list(french.expected_lengths) == ["summary"]


@pytest.mark.asyncio
async def test_validation_never_mutates_cache(cache):
    ui = InMemoryListingUI()
    _saved(ui, "French", FRENCH, summary="short")
    engine = ValidationEngine(cache, ui)

    first = await engine.run_validation(["fr-FR"])
    second = await engine.run_validation(["fr-FR"])

    assert first[0].expected_lengths == second[0].expected_lengths
    assert cache.get("fr-FR") == FRENCH
    assert cache.keys() == ["de-DE", "fr-FR"]


def test_summarize_counts():
    results = [
        ValidationResult(language_code="fr-FR", language_name="French", success=True),
        ValidationResult(language_code="de-DE", language_name="German", success=False, error="x"),
    ]
    summary = ValidationEngine.summarize(results)
    assert (summary.total, summary.passed, summary.failed) == (2, 1, 1)


@pytest.mark.asyncio
async def test_unexpected_ui_exception_is_a_failed_result(cache):
    ui = InMemoryListingUI()
    _saved(ui, "French", FRENCH)
    _saved(ui, "German", GERMAN)
    detached = RuntimeError("page detached")
    ui.read_current_fields = AsyncMock(side_effect=[detached, GERMAN.field_values(), detached])

    results = await ValidationEngine(cache, ui).run_validation(["fr-FR", "de-DE"])

    french, german = results
    assert french.success is False
    assert "page detached" in french.error
    assert french.retried is True
    assert german.success is True
