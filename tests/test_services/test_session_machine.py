"""Tests for SessionStateMachine with mocked collaborators."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from booksummarizer.models.errors import StoreFailure
from booksummarizer.models.history import (
    HistoryItem,
    SummaryFocus,
    SummaryLength,
    SummaryOptions,
    SummaryStyle,
)
from booksummarizer.models.session import Document, ErrorKind, SessionPhase
from booksummarizer.services.history_ledger import HistoryLedger
from booksummarizer.services.session_service import STORE_NOTICE, SessionStateMachine

PDF = "application/pdf"


def _pdf(name: str = "The Hobbit.pdf", size: int = 1024) -> Document:
    return Document(name=name, content_type=PDF, size=size)


@pytest.fixture
def mock_store():
    store = AsyncMock()
    store.load.return_value = []
    return store


@pytest.fixture
def ledger(mock_store):
    return HistoryLedger(mock_store)


@pytest.fixture
def mock_extractor():
    extractor = AsyncMock()
    extractor.extract.return_value = "Chapter one. In a hole in the ground there lived a hobbit."
    return extractor


@pytest.fixture
def mock_summarizer():
    summarizer = AsyncMock()
    summarizer.summarize.return_value = "A hobbit goes on an adventure."
    return summarizer


@pytest.fixture
def machine(ledger, mock_extractor, mock_summarizer):
    return SessionStateMachine(ledger, mock_extractor, mock_summarizer)


class TestSelectDocument:
    def test_select_valid_document(self, machine):
        assert machine.select_document(_pdf()) is True
        assert machine.phase == SessionPhase.DOCUMENT_SELECTED
        assert machine.state.title == "The Hobbit"
        assert machine.state.error == ""

    def test_wrong_type_rejected(self, machine):
        doc = Document(name="notes.txt", content_type="text/plain", size=10)
        assert machine.select_document(doc) is False
        assert machine.phase == SessionPhase.IDLE
        assert machine.state.error_kind == ErrorKind.VALIDATION
        assert "Unsupported file type" in machine.state.error

    def test_oversize_rejected(self, machine):
        assert machine.select_document(_pdf(size=21 * 1024 * 1024)) is False
        assert machine.phase == SessionPhase.IDLE
        assert machine.state.error == "File size exceeds 20MB limit"

    def test_exact_limit_accepted(self, machine):
        assert machine.select_document(_pdf(size=20 * 1024 * 1024)) is True

    def test_missing_document_rejected(self, machine):
        assert machine.select_document(None) is False
        assert machine.state.error_kind == ErrorKind.VALIDATION

    def test_rejected_while_document_selected(self, machine):
        machine.select_document(_pdf())
        assert machine.select_document(_pdf("Other.pdf")) is False
        assert machine.state.title == "The Hobbit"

    def test_select_advances_epoch(self, machine):
        before = machine.epoch
        machine.select_document(_pdf())
        assert machine.epoch == before + 1

    @pytest.mark.asyncio
    async def test_select_after_summary_clears_previous_result(self, machine):
        await machine.upload(_pdf())
        await machine.generate()
        assert machine.select_document(_pdf("Next.pdf")) is True
        assert machine.state.summary is None
        assert machine.state.extracted_text is None
        assert machine.state.title == "Next"

    def test_custom_accepted_types(self, ledger):
        machine = SessionStateMachine(ledger, accepted_types=["text/plain"])
        doc = Document(name="notes.txt", content_type="text/plain", size=10)
        assert machine.select_document(doc) is True


class TestExtraction:
    def test_extract_complete(self, machine):
        machine.select_document(_pdf())
        assert machine.extract_complete("some text") is True
        assert machine.phase == SessionPhase.TEXT_EXTRACTED
        assert machine.state.extracted_text == "some text"

    def test_empty_text_is_a_failure(self, machine):
        machine.select_document(_pdf())
        machine.extract_complete("   ")
        assert machine.phase == SessionPhase.ERROR
        assert machine.state.error_kind == ErrorKind.EXTRACTION
        assert machine.state.extracted_text is None

    def test_extract_complete_rejected_when_idle(self, machine):
        assert machine.extract_complete("text") is False
        assert machine.phase == SessionPhase.IDLE

    def test_stale_extraction_discarded(self, machine):
        machine.select_document(_pdf())
        epoch = machine.epoch
        machine.reset()
        assert machine.extract_complete("text", epoch) is False
        assert machine.phase == SessionPhase.IDLE

    @pytest.mark.asyncio
    async def test_upload_runs_extractor(self, machine, mock_extractor):
        state = await machine.upload(_pdf())
        assert state.phase == SessionPhase.TEXT_EXTRACTED
        mock_extractor.extract.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_upload_extractor_error(self, machine, mock_extractor):
        mock_extractor.extract.side_effect = RuntimeError("corrupt pdf")
        state = await machine.upload(_pdf())
        assert state.phase == SessionPhase.ERROR
        assert state.error_kind == ErrorKind.EXTRACTION
        assert "corrupt pdf" in state.error

    @pytest.mark.asyncio
    async def test_upload_invalid_document_skips_extractor(self, machine, mock_extractor):
        doc = Document(name="a.png", content_type="image/png", size=10)
        state = await machine.upload(doc)
        assert state.phase == SessionPhase.IDLE
        mock_extractor.extract.assert_not_called()


class TestRequestSummary:
    def test_rejected_without_text(self, machine):
        assert machine.request_summary() is False
        assert machine.phase == SessionPhase.IDLE

    def test_rejected_after_document_selected(self, machine):
        machine.select_document(_pdf())
        assert machine.request_summary() is False
        assert machine.phase == SessionPhase.DOCUMENT_SELECTED

    def test_moves_to_summarizing_with_options(self, machine):
        machine.select_document(_pdf())
        machine.extract_complete("text")
        opts = SummaryOptions(SummaryLength.SHORT, SummaryStyle.BULLET, SummaryFocus.TECHNICAL)
        assert machine.request_summary(opts) is True
        assert machine.phase == SessionPhase.SUMMARIZING
        assert machine.state.options == opts

    def test_second_request_in_flight_rejected(self, machine):
        machine.select_document(_pdf())
        machine.extract_complete("text")
        machine.request_summary()
        assert machine.request_summary() is False
        assert machine.phase == SessionPhase.SUMMARIZING


class TestSummaryCompletion:
    @pytest.mark.asyncio
    async def test_generate_adds_exactly_one_item(self, machine, ledger):
        await machine.upload(_pdf())
        opts = SummaryOptions(length=SummaryLength.LONG)
        state = await machine.generate(opts)
        assert state.phase == SessionPhase.SUMMARIZED
        assert state.summary == "A hobbit goes on an adventure."
        items = ledger.list()
        assert len(items) == 1
        assert items[0].id == state.item_id
        assert items[0].title == "The Hobbit"
        assert items[0].options == opts

    @pytest.mark.asyncio
    async def test_newest_summary_is_first(self, machine, ledger):
        await machine.upload(_pdf("First.pdf"))
        await machine.generate()
        await machine.upload(_pdf("Second.pdf"))
        await machine.generate()
        assert [i.title for i in ledger.list()] == ["Second", "First"]

    @pytest.mark.asyncio
    async def test_store_failure_keeps_summary(self, machine, ledger, mock_store):
        mock_store.save.side_effect = StoreFailure("quota exceeded")
        await machine.upload(_pdf())
        state = await machine.generate()
        assert state.phase == SessionPhase.SUMMARIZED
        assert state.notice == STORE_NOTICE
        assert len(ledger.list()) == 1

    @pytest.mark.asyncio
    async def test_summarizer_failure_keeps_text_for_retry(
        self, machine, ledger, mock_summarizer
    ):
        await machine.upload(_pdf())
        mock_summarizer.summarize.side_effect = RuntimeError("rate limited")
        state = await machine.generate()
        assert state.phase == SessionPhase.ERROR
        assert state.error_kind == ErrorKind.GENERATION
        assert state.extracted_text
        assert ledger.list() == []

        mock_summarizer.summarize.side_effect = None
        state = await machine.generate()
        assert state.phase == SessionPhase.SUMMARIZED
        assert len(ledger.list()) == 1

    @pytest.mark.asyncio
    async def test_regenerate_from_summarized(self, machine, ledger):
        await machine.upload(_pdf())
        await machine.generate()
        state = await machine.generate(SummaryOptions(style=SummaryStyle.BULLET))
        assert state.phase == SessionPhase.SUMMARIZED
        assert len(ledger.list()) == 2

    @pytest.mark.asyncio
    async def test_summary_after_reset_is_discarded(self, ledger, mock_extractor):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_summarize(text, options):
            started.set()
            await release.wait()
            return "late summary"

        summarizer = AsyncMock()
        summarizer.summarize.side_effect = slow_summarize
        machine = SessionStateMachine(ledger, mock_extractor, summarizer)
        await machine.upload(_pdf())

        task = asyncio.create_task(machine.generate())
        await started.wait()
        machine.reset()
        release.set()
        state = await task

        assert state.phase == SessionPhase.IDLE
        assert ledger.list() == []

    @pytest.mark.asyncio
    async def test_concurrent_generate_calls_summarizer_once(self, ledger, mock_extractor):
        release = asyncio.Event()

        async def slow_summarize(text, options):
            await release.wait()
            return "summary"

        summarizer = AsyncMock()
        summarizer.summarize.side_effect = slow_summarize
        machine = SessionStateMachine(ledger, mock_extractor, summarizer)
        await machine.upload(_pdf())

        first = asyncio.create_task(machine.generate())
        await asyncio.sleep(0)
        second = await machine.generate()
        assert second.phase == SessionPhase.SUMMARIZING
        release.set()
        await first

        summarizer.summarize.assert_awaited_once()
        assert len(ledger.list()) == 1

    @pytest.mark.asyncio
    async def test_generation_timeout(self, ledger, mock_extractor):
        async def never_returns(text, options):
            await asyncio.Event().wait()

        summarizer = AsyncMock()
        summarizer.summarize.side_effect = never_returns
        machine = SessionStateMachine(ledger, mock_extractor, summarizer, timeout=0.01)
        await machine.upload(_pdf())
        state = await machine.generate()
        assert state.phase == SessionPhase.ERROR
        assert state.error_kind == ErrorKind.GENERATION

    @pytest.mark.asyncio
    async def test_summary_complete_rejected_outside_summarizing(self, machine, ledger):
        assert await machine.summary_complete("text") is None
        assert ledger.list() == []


class TestMissingCollaborators:
    @pytest.mark.asyncio
    async def test_generate_without_summarizer_keeps_phase(self, ledger):
        machine = SessionStateMachine(ledger)
        machine.select_document(_pdf())
        machine.extract_complete("text")
        with pytest.raises(RuntimeError, match="No summarizer"):
            await machine.generate()
        assert machine.phase == SessionPhase.TEXT_EXTRACTED
        assert machine.request_summary() is True

    @pytest.mark.asyncio
    async def test_upload_without_extractor_keeps_phase(self, ledger):
        machine = SessionStateMachine(ledger)
        with pytest.raises(RuntimeError, match="No extractor"):
            await machine.upload(_pdf())
        assert machine.phase == SessionPhase.IDLE
        assert machine.select_document(_pdf()) is True


class TestResetAndView:
    @pytest.mark.asyncio
    async def test_reset_clears_everything(self, machine):
        await machine.upload(_pdf())
        await machine.generate()
        machine.reset()
        state = machine.state
        assert state.phase == SessionPhase.IDLE
        assert state.document is None
        assert state.extracted_text is None
        assert state.summary is None
        assert state.error == ""

    def test_view_history_item(self, machine):
        item = HistoryItem(id="h1", title="Dune", preview="Spice...")
        machine.view_history_item(item)
        assert machine.phase == SessionPhase.SUMMARIZED
        assert machine.state.summary == "Spice..."
        assert machine.state.item_id == "h1"

    def test_subscribe_receives_transitions(self, machine):
        phases = []
        machine.subscribe(lambda state: phases.append(state.phase))
        machine.select_document(_pdf())
        machine.extract_complete("text")
        assert phases == [SessionPhase.DOCUMENT_SELECTED, SessionPhase.TEXT_EXTRACTED]
