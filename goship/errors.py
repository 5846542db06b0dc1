"""Errors raised by goship lookups and external API clients."""

from __future__ import annotations

import typing as typ


class GoshipError(Exception):
    """Base class for goship errors."""


class NotFoundError(GoshipError, LookupError):
    """Raised when a project or environment name has no match."""

    def __init__(self, kind: str, name: str) -> None:
        """Initialise with the kind of object and the missing name."""
        self.kind = kind
        self.name = name
        super().__init__(f"No {kind} found: {name}")

    @classmethod
    def project(cls, name: str) -> NotFoundError:
        """Return an error for a missing project."""
        return cls("project", name)

    @classmethod
    def environment(cls, name: str) -> NotFoundError:
        """Return an error for a missing environment."""
        return cls("environment", name)


class ExternalAPIError(GoshipError, RuntimeError):
    """Raised when GitHub or Pivotal Tracker cannot satisfy a request."""

    def __init__(
        self,
        message: str,
        *,
        service: str,
        status_code: int | None = None,
    ) -> None:
        """Initialise with a message, the failing service and optional status."""
        self.service = service
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(
        cls, service: str, status_code: int, detail: str = ""
    ) -> typ.Self:
        """Return an error for an unexpected HTTP status."""
        message = f"non-200 response from {service} API: {status_code}"
        if detail:
            message = f"{message} {detail}"
        return cls(message, service=service, status_code=status_code)

    @classmethod
    def transport(cls, service: str, exc: BaseException) -> typ.Self:
        """Return an error for a request that never produced a response."""
        return cls(f"could not reach {service} API: {exc}", service=service)

    @classmethod
    def malformed(cls, service: str, field: str) -> typ.Self:
        """Return an error for a response body missing an expected field."""
        return cls(
            f"{service} API response missing expected field: {field}",
            service=service,
        )


class AuthConfigError(ExternalAPIError):
    """Raised when a credential is missing or rejected by the provider."""

    @classmethod
    def missing_token(cls, service: str, env_var: str) -> AuthConfigError:
        """Return an error when no token is configured."""
        return cls(f"{env_var} is required for the {service} API", service=service)

    @classmethod
    def rejected(cls, service: str, status_code: int) -> AuthConfigError:
        """Return an error when the provider refuses the credential."""
        return cls(
            f"{service} API rejected the configured credential: {status_code}",
            service=service,
            status_code=status_code,
        )


class StoreError(GoshipError):
    """Raised when the key-value store cannot complete a write."""

    def __init__(self, key: str, reason: str) -> None:
        """Initialise with the key being written and the failure reason."""
        self.key = key
        self.reason = reason
        super().__init__(f"Could not set {key}: {reason}")
