"""Summarization session state machine: upload -> extraction -> generation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace

from booksummarizer.infra.extractor import Extractor
from booksummarizer.models.errors import (
    ExtractionFailure,
    GenerationFailure,
    ValidationFailure,
)
from booksummarizer.models.history import PREVIEW_LENGTH, HistoryItem, SummaryOptions
from booksummarizer.models.session import Document, ErrorKind, SessionPhase, SessionState
from booksummarizer.services.history_ledger import HistoryLedger
from booksummarizer.services.summarizer import Summarizer

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionState], None]

DEFAULT_ACCEPTED_TYPES = ("application/pdf",)
DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024
STORE_NOTICE = "The summary was created but could not be saved to history storage."


class SessionStateMachine:
    """Drives one upload-to-summary lifecycle at a time.

    Transition methods never raise for a wrong phase: they log, leave the
    state untouched, and return False. Results from the Extractor or
    Summarizer carry the epoch they were issued under; `select_document` and
    `reset` advance the epoch, so a result that resolves afterwards is dropped.
    """

    def __init__(
        self,
        ledger: HistoryLedger,
        extractor: Extractor | None = None,
        summarizer: Summarizer | None = None,
        accepted_types: tuple[str, ...] | list[str] = DEFAULT_ACCEPTED_TYPES,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        preview_length: int = PREVIEW_LENGTH,
        timeout: float | None = None,
    ) -> None:
        self._ledger = ledger
        self._extractor = extractor
        self._summarizer = summarizer
        self._accepted_types = tuple(accepted_types)
        self._max_upload_bytes = max_upload_bytes
        self._preview_length = preview_length
        self._timeout = timeout
        self._state = SessionState()
        self._epoch = 0
        self._listeners: list[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def epoch(self) -> int:
        return self._epoch

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a state-change callback. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_state(self, state: SessionState) -> None:
        previous = self._state.phase
        self._state = state
        if previous != state.phase:
            logger.debug("Session %s -> %s", previous.value, state.phase.value)
        for listener in list(self._listeners):
            listener(state)

    def _reject(self, action: str) -> bool:
        logger.warning("Rejected %s in phase %s", action, self._state.phase.value)
        return False

    def _is_stale(self, epoch: int | None, action: str) -> bool:
        if epoch is not None and epoch != self._epoch:
            logger.info("Discarding stale %s (epoch %d, current %d)", action, epoch, self._epoch)
            return True
        return False

    # --- Transitions ---

    def validate_document(self, document: Document | None) -> None:
        """Raise ValidationFailure if the document cannot be accepted."""
        if document is None:
            raise ValidationFailure("No document selected")
        if document.content_type not in self._accepted_types:
            raise ValidationFailure(
                f"Unsupported file type '{document.content_type}'. "
                f"Accepted: {', '.join(self._accepted_types)}"
            )
        if document.size > self._max_upload_bytes:
            limit_mb = self._max_upload_bytes / (1024 * 1024)
            raise ValidationFailure(f"File size exceeds {limit_mb:g}MB limit")

    def select_document(self, document: Document | None) -> bool:
        """Idle|Summarized|Error -> DocumentSelected. Invalid files stay put with an error."""
        if not self._state.phase.accepts_document:
            return self._reject("select_document")
        try:
            self.validate_document(document)
        except ValidationFailure as e:
            logger.warning("Document rejected: %s", e)
            self._set_state(replace(
                self._state, error=str(e), error_kind=ErrorKind.VALIDATION,
            ))
            return False

        self._epoch += 1
        self._set_state(SessionState(
            phase=SessionPhase.DOCUMENT_SELECTED,
            document=document,
            title=document.title,
            options=self._state.options,
        ))
        logger.info("Selected document %s (%d bytes)", document.name, document.size)
        return True

    def extract_complete(self, text: str, epoch: int | None = None) -> bool:
        """DocumentSelected -> TextExtracted."""
        if self._is_stale(epoch, "extraction result"):
            return False
        if self._state.phase != SessionPhase.DOCUMENT_SELECTED:
            return self._reject("extract_complete")
        if not text or not text.strip():
            return self.extract_failed(ExtractionFailure("No text found in document"), epoch)
        self._set_state(replace(
            self._state, phase=SessionPhase.TEXT_EXTRACTED, extracted_text=text,
        ))
        logger.info("Extracted %d characters from %s", len(text), self._state.title)
        return True

    def extract_failed(self, cause: Exception | str, epoch: int | None = None) -> bool:
        """DocumentSelected -> Error (extraction)."""
        if self._is_stale(epoch, "extraction failure"):
            return False
        if self._state.phase != SessionPhase.DOCUMENT_SELECTED:
            return self._reject("extract_failed")
        logger.error("Extraction failed for %s: %s", self._state.title, cause)
        self._set_state(replace(
            self._state,
            phase=SessionPhase.ERROR,
            error=f"Could not extract text from the document: {cause}",
            error_kind=ErrorKind.EXTRACTION,
        ))
        return True

    def request_summary(self, options: SummaryOptions | None = None) -> bool:
        """TextExtracted (or Summarized/Error with text) -> Summarizing.

        Only one request may be in flight; a call while Summarizing is rejected.
        """
        if self._state.phase == SessionPhase.SUMMARIZING:
            return self._reject("request_summary (already in flight)")
        if not self._state.extracted_text:
            return self._reject("request_summary (no extracted text)")
        if not self._state.can_summarize:
            return self._reject("request_summary")
        self._set_state(replace(
            self._state,
            phase=SessionPhase.SUMMARIZING,
            options=options or self._state.options,
            summary=None,
            error="",
            error_kind=None,
            notice="",
            item_id=None,
        ))
        return True

    async def summary_complete(self, text: str, epoch: int | None = None) -> HistoryItem | None:
        """Summarizing -> Summarized, recording the result in the ledger."""
        if self._is_stale(epoch, "summary"):
            return None
        if self._state.phase != SessionPhase.SUMMARIZING:
            self._reject("summary_complete")
            return None

        item = HistoryItem.create(
            title=self._state.title,
            options=self._state.options,
            summary=text,
            preview_length=self._preview_length,
        )
        self._set_state(replace(
            self._state, phase=SessionPhase.SUMMARIZED, summary=text, item_id=item.id,
        ))
        persisted = await self._ledger.append(item)
        if not persisted and self._state.item_id == item.id:
            self._set_state(replace(self._state, notice=STORE_NOTICE))
        return item

    def summary_failed(self, cause: Exception | str, epoch: int | None = None) -> bool:
        """Summarizing -> Error, keeping the extracted text for a retry."""
        if self._is_stale(epoch, "summary failure"):
            return False
        if self._state.phase != SessionPhase.SUMMARIZING:
            return self._reject("summary_failed")
        logger.error("Summary failed for %s: %s", self._state.title, cause)
        self._set_state(replace(
            self._state,
            phase=SessionPhase.ERROR,
            error="An error occurred while generating the summary. Please try again.",
            error_kind=ErrorKind.GENERATION,
        ))
        return True

    def reset(self) -> None:
        """Any phase -> Idle, clearing every transient field."""
        self._epoch += 1
        self._set_state(SessionState())
        logger.debug("Session reset (epoch %d)", self._epoch)

    def view_history_item(self, item: HistoryItem) -> None:
        """Show a past result in the session without touching the ledger."""
        self._epoch += 1
        self._set_state(SessionState(
            phase=SessionPhase.SUMMARIZED,
            title=item.title,
            options=item.options,
            summary=item.body,
            item_id=item.id,
        ))

    # --- Collaborator drivers ---

    async def _call(self, coro):
        if self._timeout:
            return await asyncio.wait_for(coro, self._timeout)
        return await coro

    async def upload(self, document: Document | None) -> SessionState:
        """Select a document and run the Extractor on it."""
        if self._extractor is None:
            raise RuntimeError("No extractor configured")
        if not self.select_document(document):
            return self._state

        epoch = self._epoch
        try:
            text = await self._call(self._extractor.extract(document))
        except asyncio.TimeoutError:
            self.extract_failed(ExtractionFailure("Extraction timed out"), epoch)
        except Exception as e:
            self.extract_failed(e, epoch)
        else:
            self.extract_complete(text, epoch)
        return self._state

    async def generate(self, options: SummaryOptions | None = None) -> SessionState:
        """Request a summary and run the Summarizer on the extracted text."""
        if self._summarizer is None:
            raise RuntimeError("No summarizer configured")
        if not self.request_summary(options):
            return self._state

        epoch = self._epoch
        state = self._state
        try:
            text = await self._call(self._summarizer.summarize(state.extracted_text, state.options))
        except asyncio.TimeoutError:
            self.summary_failed(GenerationFailure("Summary generation timed out"), epoch)
        except Exception as e:
            self.summary_failed(e, epoch)
        else:
            await self.summary_complete(text, epoch)
        return self._state
