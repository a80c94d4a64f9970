"""Fetch results and the error policy applied to them.

A :class:`FetchResult` carries either a parsed CMS payload or a
:class:`~schoolsite.exceptions.CMSFetchError`. What happens to an error is
decided in one place, :class:`FetchPolicy`, which maps each error kind to
``"substitute"`` (return the ``{"data": None}`` sentinel) or
``"propagate"`` (raise). Business logic never swallows fetch errors itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from schoolsite.exceptions import CMSFetchError

SUBSTITUTE = "substitute"
PROPAGATE = "propagate"

ERROR_KINDS: tuple[str, ...] = ("network", "timeout", "http", "decode")


def empty_payload() -> dict[str, Any]:
    """Return a fresh copy of the sentinel used in place of a failed fetch."""
    return {"data": None}


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one CMS request."""

    endpoint: str
    payload: dict[str, Any] | None = None
    error: CMSFetchError | None = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls, endpoint: str, payload: dict[str, Any], *, from_cache: bool = False
    ) -> FetchResult:
        return cls(endpoint=endpoint, payload=payload, from_cache=from_cache)

    @classmethod
    def failure(cls, endpoint: str, error: CMSFetchError) -> FetchResult:
        return cls(endpoint=endpoint, error=error)

    def unwrap(self) -> dict[str, Any]:
        """Return the payload or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.payload if self.payload is not None else empty_payload()


@dataclass(frozen=True)
class FetchPolicy:
    """Per-error-kind decision between substituting a default and raising.

    Examples
    --------
    >>> FetchPolicy.production().action_for("timeout")
    'substitute'
    >>> FetchPolicy.development().action_for("http")
    'propagate'
    """

    actions: dict[str, str] = field(default_factory=dict)
    default_action: str = PROPAGATE

    def __post_init__(self) -> None:
        for kind, action in self.actions.items():
            if action not in (SUBSTITUTE, PROPAGATE):
                raise ValueError(f"Unknown policy action {action!r} for {kind!r}")

    @classmethod
    def production(cls) -> FetchPolicy:
        """Substitute every error so a static build survives an offline CMS."""
        return cls({kind: SUBSTITUTE for kind in ERROR_KINDS}, SUBSTITUTE)

    @classmethod
    def development(cls) -> FetchPolicy:
        """Propagate every error so failures are visible while developing."""
        return cls({kind: PROPAGATE for kind in ERROR_KINDS}, PROPAGATE)

    @classmethod
    def for_mode(cls, is_production: bool) -> FetchPolicy:
        return cls.production() if is_production else cls.development()

    def action_for(self, kind: str) -> str:
        # Timeouts follow whatever the policy says about network failures
        # unless configured explicitly.
        if kind == "timeout" and kind not in self.actions:
            kind = "network"
        return self.actions.get(kind, self.default_action)

    def resolve(self, result: FetchResult) -> dict[str, Any]:
        """Apply the policy to a result: payload, sentinel, or raise."""
        if result.error is None:
            return result.unwrap()
        if self.action_for(result.error.kind) == SUBSTITUTE:
            return empty_payload()
        raise result.error
