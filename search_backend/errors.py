from __future__ import annotations


class SearchBackendError(Exception):
    """Base class for errors raised by the search backend."""


class TransientUpstreamError(SearchBackendError):
    """An upstream call (completion service or record store) failed.

    Never cached. Retrying is left to the caller.
    """


class CompletionError(TransientUpstreamError):
    """The completion service call failed or returned no content."""


class StoreError(TransientUpstreamError):
    """A record store read or write failed."""


class MalformedIntentError(SearchBackendError):
    """Completion output contained no parseable JSON object."""


class ValidationError(SearchBackendError):
    """The incoming request is missing required input."""
