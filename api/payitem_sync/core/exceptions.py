"""Pay item sync exception hierarchy."""


class PayItemSyncError(Exception):
    """Base exception for all pay item sync errors."""


class BusinessNotFound(PayItemSyncError):
    """No local business matches the given external ID."""

    def __init__(self, external_id: str) -> None:
        self.external_id = external_id
        super().__init__(f"The business External ID that you provided does not exist: {external_id}")


# ─── Partner feed ─────────────────────────────────────────────────────────────

class PartnerFeedError(PayItemSyncError):
    """A page of the partner feed could not be collected."""

    def __init__(
        self,
        message: str,
        business_external_id: str,
        page: int | None = None,
        status_code: int | None = None,
    ) -> None:
        self.business_external_id = business_external_id
        self.page = page
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(PartnerFeedError):
    """Partner rejected the API key (401)."""


class NotFoundError(PartnerFeedError):
    """Partner does not know the business (404)."""


class TransportError(PartnerFeedError):
    """Any other non-200 status, or the request never completed."""


class MalformedResponse(PartnerFeedError):
    """A 200 page whose body does not match the expected payload."""


class PaginationLimitExceeded(MalformedResponse):
    """The partner kept reporting more pages past the configured ceiling."""


# ─── Reconciliation ───────────────────────────────────────────────────────────

class SyncFailure(PayItemSyncError):
    """A reconciliation run was rolled back. Wraps the originating error."""

    def __init__(self, message: str, business_external_id: str | None = None) -> None:
        self.business_external_id = business_external_id
        super().__init__(message)
