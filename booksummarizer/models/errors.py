"""Failure taxonomy shared by the session, ledger, and chat layers."""

from __future__ import annotations


class ValidationFailure(ValueError):
    """Bad input caught before any collaborator call (file type/size, empty question)."""


class CollaboratorFailure(RuntimeError):
    """An external collaborator returned an error or timed out."""


class ExtractionFailure(CollaboratorFailure):
    """The Extractor could not produce text for a document."""


class GenerationFailure(CollaboratorFailure):
    """The Summarizer or Responder could not produce text."""


class StoreFailure(RuntimeError):
    """Durable read/write fault."""
