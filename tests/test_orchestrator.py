"""Tests de l'orchestration d'un lot de traduction."""
import threading

import pytest

from listing_translator.cache import TranslationCache
from listing_translator.errors import MissingContent
from listing_translator.models import FieldToggles, RunConfig, TranslationRecord
from listing_translator.orchestrator import BatchOrchestrator, unique_codes
from listing_translator.translator import ListingTranslator


def _orchestrator(llm, cache=None):
    return BatchOrchestrator(ListingTranslator(llm), cache if cache is not None else TranslationCache())


def test_unique_codes_preserves_order():
    assert unique_codes(["fr-FR", " de-DE ", "fr-FR", "", "en-US"]) == ["fr-FR", "de-DE", "en-US"]


@pytest.mark.asyncio
async def test_source_language_is_copied_and_order_preserved(content, make_llm):
    llm = make_llm()
    orchestrator = _orchestrator(llm)

    results = await orchestrator.run_batch(["en-US", "fr-FR"], content)

    assert [result.language_code for result in results] == ["en-US", "fr-FR"]
    english, french = results
    assert english.success is True
    assert english.summary == "Hello world"
    assert english.description == "<p>Hi</p>"
    assert llm.calls_for("English") == []

    assert french.success is True
    assert french.summary == "[French] Hello world"
    assert french.description == "[French] <p>Hi</p>"
    assert french.keyword1 == "[French] sync"
    assert french.keyword3 == ""
    assert orchestrator.cache.keys() == ["en-US", "fr-FR"]


@pytest.mark.asyncio
async def test_order_preserved_with_concurrent_languages(content, make_llm):
    llm = make_llm(delays={"French": 0.05, "German": 0.01})
    orchestrator = _orchestrator(llm)
    config = RunConfig(max_concurrent_languages=3)

    results = await orchestrator.run_batch(["fr-FR", "de-DE", "en-US"], content, config)

    assert [result.language_code for result in results] == ["fr-FR", "de-DE", "en-US"]
    assert all(result.success for result in results)


@pytest.mark.asyncio
async def test_one_call_per_enabled_non_empty_field(content, make_llm):
    llm = make_llm()
    orchestrator = _orchestrator(llm)

    await orchestrator.run_batch(["fr-FR"], content)

    assert sorted(llm.calls_for("French")) == ["description", "keyword", "keyword", "summary"]


@pytest.mark.asyncio
async def test_disabled_fields_keep_source_values(content, make_llm):
    llm = make_llm()
    orchestrator = _orchestrator(llm)
    config = RunConfig(field_toggles=FieldToggles(description=False, keywords=False))

    results = await orchestrator.run_batch(["fr-FR"], content, config)

    french = results[0]
    assert french.summary == "[French] Hello world"
    assert french.description == "<p>Hi</p>"
    assert french.keyword1 == "sync"
    assert llm.calls_for("French") == ["summary"]


@pytest.mark.asyncio
async def test_cache_hit_short_circuits_translation(content, make_llm):
    cache = TranslationCache()
    previous = TranslationRecord(language_code="fr-FR", summary="Salut", description="<p>Salut</p>")
    cache.put("fr-FR", previous)
    llm = make_llm()

    results = await _orchestrator(llm, cache).run_batch(["fr-FR", "fr-FR"], content)

    assert len(results) == 1
    assert results[0].cached is True
    assert results[0].summary == "Salut"
    llm.complete.assert_not_called()


@pytest.mark.asyncio
async def test_force_retranslates_cached_language(content, make_llm):
    cache = TranslationCache()
    cache.put("fr-FR", TranslationRecord(language_code="fr-FR", summary="Salut", description="Salut"))
    llm = make_llm()

    results = await _orchestrator(llm, cache).run_batch(["fr-FR"], content, force=True)

    assert results[0].cached is False
    assert cache.get("fr-FR").summary == "[French] Hello world"


@pytest.mark.asyncio
async def test_failed_language_leaves_no_entry(content, make_llm):
    llm = make_llm(fail={("French", "description")})
    orchestrator = _orchestrator(llm)

    results = await orchestrator.run_batch(["fr-FR", "de-DE"], content)

    french, german = results
    assert french.success is False
    assert "description" in french.error
    assert french.summary is None
    assert orchestrator.cache.get("fr-FR") is None
    # le lot continue après l'échec
    assert german.success is True
    assert orchestrator.cache.has("de-DE")


@pytest.mark.asyncio
async def test_failed_language_keeps_previous_entry(content, make_llm):
    cache = TranslationCache()
    previous = TranslationRecord(language_code="fr-FR", summary="Ancien", description="<p>Ancien</p>")
    cache.put("fr-FR", previous)
    llm = make_llm(fail={"description"})

    results = await _orchestrator(llm, cache).run_batch(["fr-FR"], content, force=True)

    assert results[0].success is False
    assert cache.get("fr-FR") == previous


@pytest.mark.asyncio
async def test_missing_content_is_fatal(make_llm):
    llm = make_llm()

    with pytest.raises(MissingContent):
        await _orchestrator(llm).run_batch(["en-US", "fr-FR"], None)
    llm.complete.assert_not_called()


@pytest.mark.asyncio
async def test_empty_batch(content, make_llm):
    assert await _orchestrator(make_llm()).run_batch([], content) == []


@pytest.mark.asyncio
async def test_unknown_code_uses_code_as_language_name(content, make_llm):
    llm = make_llm()

    results = await _orchestrator(llm).run_batch(["xx-XX"], content)

    assert results[0].success is True
    assert results[0].summary == "[xx-XX] Hello world"


class ThreadRecordingCache(TranslationCache):
    def __init__(self):
        super().__init__()
        self.writer_threads = []

    def put(self, language_code, record):
        self.writer_threads.append(threading.get_ident())
        super().put(language_code, record)


@pytest.mark.asyncio
async def test_cache_writes_run_off_the_event_loop(content, make_llm):
    cache = ThreadRecordingCache()

    await _orchestrator(make_llm(), cache).run_batch(["en-US", "fr-FR"], content)

    assert len(cache.writer_threads) == 2
    assert threading.get_ident() not in cache.writer_threads
