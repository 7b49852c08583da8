"""
HTTP client for the eSIM Access partner API.

Every endpoint is a signed ``POST`` with a JSON body.  A call fails with
EsimAccessError when the HTTP status is not 2xx or when the JSON body
carries an ``errorCode`` other than ``"0"``.  Nothing is retried here;
callers decide what a failure means for their flow.

Usage::

    async with get_esim_client() as client:
        packages = await client.list_packages(location_code="JP")
"""

from __future__ import annotations

from typing import Any

import httpx

from app.core.config import settings
from app.core.constants import ESIM_PROVISIONING_ERROR_CODE
from app.core.errors import EsimAccessError
from app.core.logging import get_logger
from app.esim_access.pricing import balance_summary
from app.esim_access.schemas import EsimProfile, PackageInfo, PartnerPackage
from app.esim_access.signing import build_auth_headers, serialize_body

logger = get_logger(__name__)

# ── Endpoints ─────────────────────────────────
PACKAGE_LIST = "/api/v1/open/package/list"
ESIM_ORDER = "/api/v1/open/esim/order"
ESIM_QUERY = "/api/v1/open/esim/query"
ESIM_SUSPEND = "/api/v1/open/esim/suspend"
ESIM_UNSUSPEND = "/api/v1/open/esim/unsuspend"
ESIM_CANCEL = "/api/v1/open/esim/cancel"
ESIM_REVOKE = "/api/v1/open/esim/revoke"
BALANCE_QUERY = "/api/v1/open/balance/query"

QUERY_PAGER = {"pageNum": 1, "pageSize": 100}


class EsimAccessClient:
    """Signed async client; one instance wraps one httpx.AsyncClient."""

    def __init__(
        self,
        *,
        base_url: str,
        access_code: str,
        secret_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._access_code = access_code
        self._secret_key = secret_key
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> EsimAccessClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Transport ─────────────────────────────

    async def _send(self, endpoint: str, body: dict[str, Any]) -> tuple[httpx.Response, dict[str, Any]]:
        payload = serialize_body(body)
        # Raises MissingCredentialsError before anything leaves the process
        headers = build_auth_headers(payload, self._access_code, self._secret_key)

        logger.debug("Partner API request", endpoint=endpoint)
        try:
            response = await self._http.post(endpoint, content=payload.encode(), headers=headers)
        except httpx.HTTPError as exc:
            raise EsimAccessError(
                f"API request failed: {exc.__class__.__name__}",
                details={"endpoint": endpoint},
            ) from exc

        if not response.is_success:
            logger.warning(
                "Partner API returned error status",
                endpoint=endpoint,
                status_code=response.status_code,
            )
            raise EsimAccessError(
                f"API request failed: {response.status_code} {response.reason_phrase}",
                http_status=response.status_code,
                response_body=response.text,
                details={"endpoint": endpoint},
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Partner API returned non-JSON body", endpoint=endpoint, status_code=response.status_code)
            raise EsimAccessError(
                "API request failed: invalid JSON response",
                http_status=response.status_code,
                response_body=response.text,
                details={"endpoint": endpoint},
            ) from exc
        if not isinstance(data, dict):
            raise EsimAccessError(
                "API request failed: unexpected response shape",
                http_status=response.status_code,
                response_body=response.text,
                details={"endpoint": endpoint},
            )

        return response, data

    @staticmethod
    def _error_code(data: dict[str, Any]) -> str | None:
        code = data.get("errorCode")
        if code in (None, "", "0", 0):
            return None
        return str(code)

    async def request(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        """Signed POST returning the decoded body; partner errors raise."""
        response, data = await self._send(endpoint, body)
        error_code = self._error_code(data)
        if error_code is not None:
            message = data.get("errorMsg") or "Unknown error"
            logger.warning("Partner API error", endpoint=endpoint, error_code=error_code, error=message)
            raise EsimAccessError(
                f"API error: {error_code} - {message}",
                http_status=response.status_code,
                error_code=error_code,
                response_body=response.text,
                details={"endpoint": endpoint},
            )
        return data

    # ── Catalog ───────────────────────────────

    async def list_packages(
        self,
        *,
        location_code: str | None = None,
        package_code: str | None = None,
        page_size: int | None = None,
    ) -> list[PartnerPackage]:
        body: dict[str, Any] = {}
        if location_code:
            body["locationCode"] = location_code
        if package_code:
            body["packageCode"] = package_code
        if page_size:
            body["pager"] = {"pageNum": 1, "pageSize": page_size}

        data = await self.request(PACKAGE_LIST, body)
        raw = (data.get("obj") or {}).get("packageList") or []
        return [PartnerPackage.model_validate(item) for item in raw]

    # ── Orders / profiles ─────────────────────

    async def order_esims(
        self,
        *,
        transaction_id: str,
        amount: int,
        package_info_list: list[PackageInfo],
    ) -> str:
        """Place a partner order and return its ``orderNo``."""
        body = {
            "transactionId": transaction_id,
            "amount": amount,
            "packageInfoList": [p.model_dump(by_alias=True) for p in package_info_list],
        }
        data = await self.request(ESIM_ORDER, body)
        order_no = (data.get("obj") or {}).get("orderNo")
        if not order_no:
            raise EsimAccessError("API error: order response carried no orderNo", response_body=str(data))
        logger.info("Partner order placed", transaction_id=transaction_id, order_no=order_no)
        return order_no

    async def query_esims(
        self,
        *,
        order_no: str | None = None,
        iccid: str | None = None,
    ) -> list[EsimProfile]:
        """Profiles for an order or ICCID; ``[]`` while still provisioning."""
        body: dict[str, Any] = {}
        if order_no:
            body["orderNo"] = order_no
        if iccid:
            body["iccid"] = iccid
        body["pager"] = dict(QUERY_PAGER)

        response, data = await self._send(ESIM_QUERY, body)
        error_code = self._error_code(data)
        if error_code == ESIM_PROVISIONING_ERROR_CODE:
            logger.info("Profiles still provisioning", order_no=order_no, iccid=iccid)
            return []
        if error_code is not None:
            message = data.get("errorMsg") or "Unknown error"
            raise EsimAccessError(
                f"API error: {error_code} - {message}",
                http_status=response.status_code,
                error_code=error_code,
                response_body=response.text,
            )

        obj = data.get("obj") or {}
        raw = obj.get("esimList") or obj.get("eSimList") or []
        return [EsimProfile.model_validate(item) for item in raw]

    async def query_esim(self, iccid: str) -> EsimProfile | None:
        profiles = await self.query_esims(iccid=iccid)
        return profiles[0] if profiles else None

    async def suspend(self, iccid: str) -> None:
        await self.request(ESIM_SUSPEND, {"iccid": iccid})

    async def unsuspend(self, iccid: str) -> None:
        await self.request(ESIM_UNSUSPEND, {"iccid": iccid})

    async def cancel(self, iccid: str) -> None:
        # Partner only accepts this before the profile is installed
        await self.request(ESIM_CANCEL, {"iccid": iccid})

    async def revoke(self, iccid: str) -> None:
        await self.request(ESIM_REVOKE, {"iccid": iccid})

    # ── Account ───────────────────────────────

    async def get_balance(self) -> dict[str, float | int]:
        data = await self.request(BALANCE_QUERY, {})
        raw = (data.get("obj") or {}).get("balance", 0)
        return balance_summary(raw)


def get_esim_client(transport: httpx.AsyncBaseTransport | None = None) -> EsimAccessClient:
    """Build a client from application settings."""
    return EsimAccessClient(
        base_url=settings.ESIM_API_BASE_URL,
        access_code=settings.ESIM_ACCESS_CODE,
        secret_key=settings.ESIM_SECRET_KEY,
        timeout=settings.ESIM_API_TIMEOUT,
        transport=transport,
    )
