from typing import Any, Iterable, Mapping, Optional


class ServiceValidationError(Exception):
    """Raised when input data is invalid or a precondition for a service call is not met.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers (400)
    """

    http_status = 400

    def __init__(self, message: str = "Invalid input", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class InvalidShiftError(ServiceValidationError):
    """Raised when a shift-scoped edit names anything other than morning or evening."""

    def __init__(self, shift: Any):
        super().__init__(
            f"Invalid shift {shift!r}. Must be morning or evening",
            details={"shift": shift, "allowed": ["morning", "evening"]},
            code="INVALID_SHIFT",
        )
        self.shift = shift


class NotFoundError(Exception):
    """Raised when a requested resource was not found.

    Attributes are similar to ServiceValidationError. http_status is 404.
    """

    http_status = 404

    def __init__(self, message: str = "Not found", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class UnknownTierError(NotFoundError):
    """Raised when a seller has no offering at the requested tier.

    The seller's real tiers travel in ``details["available_tiers"]`` so a client
    can offer a correction.
    """

    def __init__(self, seller_id: Any, tier: str, available_tiers: Iterable[str]):
        tiers = sorted(available_tiers)
        listed = ", ".join(tiers) if tiers else "none"
        super().__init__(
            f'No offerings found for tier "{tier}". Available tiers: {listed}',
            details={"seller_id": str(seller_id), "tier": tier, "available_tiers": tiers},
            code="UNKNOWN_TIER",
        )
        self.tier = tier
        self.available_tiers = tiers


class ConflictError(Exception):
    """Raised when a resource conflict occurs (e.g., duplicate entry).

    Attributes are similar to ServiceValidationError. http_status is 409.
    """

    http_status = 409

    def __init__(self, message: str = "Conflict", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class SnapshotWriteError(Exception):
    """Raised when a meal snapshot could not be written to one subscription.

    The record is left untouched; propagation reports the failure per subscription
    instead of aborting the pass.
    """

    def __init__(self, subscription_id: Any, message: str):
        super().__init__(message)
        self.subscription_id = subscription_id
        self.message = message

    def __str__(self) -> str:
        return self.message
