"""
Partner pay item feed client.

Pulls every page of pay item records for one business from the payroll
partner and returns them in page order. Pages are fetched strictly one after
another; the partner's ``isLastPage`` flag is the only normal stop signal.

Failures are never retried here. Any page that fails aborts the whole
collection and the records gathered so far are discarded.
"""

import logging
from collections.abc import Iterator

import requests
from pydantic import ValidationError

from payitem_sync.core.config import settings
from payitem_sync.core.exceptions import (
    AuthenticationError,
    MalformedResponse,
    NotFoundError,
    PaginationLimitExceeded,
    TransportError,
)
from payitem_sync.models.business import Business
from payitem_sync.schemas.partner import PartnerPage, PartnerPayItem

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


class PayItemFeedClient:
    def __init__(
        self,
        business: Business,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        max_pages: int | None = None,
        http=None,
    ):
        self.business = business
        self.base_url = base_url if base_url is not None else settings.partner_url
        self.api_key = api_key if api_key is not None else settings.partner_api_key
        self.timeout = timeout if timeout is not None else settings.partner_timeout_seconds
        # 0 disables the ceiling
        self.max_pages = max_pages if max_pages is not None else settings.partner_max_pages
        # Anything with a requests-compatible ``get`` (a Session, or the module itself)
        self.http = http if http is not None else requests

    @property
    def business_external_id(self) -> str:
        return self.business.external_id

    def scoped_url(self) -> str:
        return f"{self.base_url}{self.business.external_id}"

    def make_request(self, page: int) -> requests.Response:
        """Issue the GET for a single page with the partner key attached."""
        return self.http.get(
            self.scoped_url(),
            params={"page": page},
            headers={API_KEY_HEADER: self.api_key},
            timeout=self.timeout,
        )

    def process(self, page: int) -> requests.Response:
        """Fetch ``page`` and classify the status code. Returns only 200 responses."""
        ext_id = self.business_external_id
        try:
            response = self.make_request(page)
        except requests.RequestException as exc:
            raise TransportError(
                f"Request to sync service failed: {exc}", ext_id, page=page
            ) from exc

        status = response.status_code
        if status == 401:
            logger.warning("Unauthorized response from Sync Job for %s", ext_id)
            raise AuthenticationError(
                f"Unauthorized response from sync service for {ext_id}",
                ext_id, page=page, status_code=status,
            )
        if status == 404:
            logger.critical("Not Found response from Sync Job for %s", ext_id)
            raise NotFoundError(
                f"Not Found response from sync service for {ext_id}",
                ext_id, page=page, status_code=status,
            )
        if status != 200:
            raise TransportError(
                f"Invalid response from sync service (HTTP {status})",
                ext_id, page=page, status_code=status,
            )
        return response

    def _parse(self, response: requests.Response, page: int) -> PartnerPage:
        ext_id = self.business_external_id
        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponse(
                f"Sync service returned a non-JSON body on page {page}",
                ext_id, page=page, status_code=200,
            ) from exc

        try:
            parsed = PartnerPage.model_validate(body)
        except ValidationError as exc:
            raise MalformedResponse(
                f"Sync service returned an unexpected payload on page {page}: "
                f"{exc.error_count()} validation error(s)",
                ext_id, page=page, status_code=200,
            ) from exc

        if parsed.is_last_page is None:
            raise MalformedResponse(
                "Missing data in response, failing and rolling back",
                ext_id, page=page, status_code=200,
            )
        return parsed

    def iter_pages(self) -> Iterator[PartnerPage]:
        """Yield validated pages from page 1 until the partner reports the last one."""
        page = 1
        while True:
            if self.max_pages and page > self.max_pages:
                raise PaginationLimitExceeded(
                    f"Sync service reported more than {self.max_pages} pages",
                    self.business_external_id, page=page,
                )
            logger.debug("Fetching page %d for %s", page, self.business_external_id)
            parsed = self._parse(self.process(page), page)
            yield parsed
            if parsed.is_last_page:
                return
            page += 1

    def collect(self) -> list[PartnerPayItem]:
        """Return every record of every page, in page and response order."""
        records: list[PartnerPayItem] = []
        pages = 0
        for parsed in self.iter_pages():
            records.extend(parsed.pay_items)
            pages += 1
        logger.info(
            "Collected %d pay items across %d page(s) for %s",
            len(records), pages, self.business_external_id,
        )
        return records
