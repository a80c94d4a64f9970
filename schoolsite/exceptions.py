"""Central application exception hierarchy.

This module defines the base application exception ``AppError`` and the
specialized subclasses used by the site build pipeline to represent its
failure modes (configuration, CMS transport and HTTP failures, and missing
pages). Every error carries a code, a message, context and a transient flag.
"""

from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'CMS_FETCH_ERROR'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.
    transient : bool, optional
        Whether the error is temporary and may succeed on a later build.

    Attributes
    ----------
    code : str
        Stable machine-readable error code.
    message : str
        Human-readable message.
    context : dict
        Structured, non-sensitive context for logging.
    transient : bool
        True if the error is transient.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'}, transient=True)
    >>> e.code
    'CODE'
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})
        self.transient = bool(transient)

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
            "is_transient": self.transient,
        }


class ConfigurationError(AppError):
    """Raised for invalid or missing configuration."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "CONFIGURATION_ERROR", message, context=context, transient=False
        )


class ExternalServiceError(AppError):
    """Raised for unexpected failures from an external service."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = True,
    ) -> None:
        super().__init__(
            "EXTERNAL_SERVICE_ERROR", message, context=context, transient=transient
        )


class CMSFetchError(ExternalServiceError):
    """Raised (or carried in a ``FetchResult``) when a CMS request fails.

    Parameters
    ----------
    kind : str
        Error class: ``"network"``, ``"timeout"``, ``"http"`` or ``"decode"``.
    message : str
        Human-readable description.
    endpoint : str
        The API path that was requested.
    status : int | None, optional
        HTTP status code for ``"http"`` errors.
    context : Mapping[str, Any] | None, optional
        Extra structured context for logging.

    Notes
    -----
    Server errors, network failures and timeouts are flagged transient; a
    4xx status or an undecodable body is not.
    """

    def __init__(
        self,
        kind: str,
        message: str,
        *,
        endpoint: str,
        status: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        transient = kind in ("network", "timeout") or (
            status is not None and status >= 500
        )
        merged = {"kind": kind, "endpoint": endpoint, "status": status}
        merged.update(context or {})
        super().__init__(message, context=merged, transient=transient)
        self.code = "CMS_FETCH_ERROR"
        self.kind = kind
        self.endpoint = endpoint
        self.status = status


class PageNotFoundError(AppError):
    """Raised when a detail page is requested for a nonexistent slug or id."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("PAGE_NOT_FOUND", message, context=context, transient=False)
