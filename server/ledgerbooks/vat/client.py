"""HMRC Making Tax Digital VAT API client.

Only the two calls this service needs: fetching obligations and submitting a
return. Failures are raised as TaxAuthorityError with the upstream status and
body; nothing is retried here, since a retried submission could be filed twice.
"""

from datetime import date
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from ledgerbooks.config import settings
from ledgerbooks.exceptions import TaxAuthorityError

logger = logging.getLogger(__name__)

HMRC_ACCEPT = "application/vnd.hmrc.1.0+json"


def _upstream_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.text or f"HMRC API error: {response.status_code}"


class HmrcVatClient:
    def __init__(
        self,
        access_token: Callable[[], str],
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._access_token = access_token
        self.base_url = (base_url or settings.hmrc_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.hmrc_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token()}",
            "Accept": HMRC_ACCEPT,
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("HMRC %s %s timed out", method, path)
            raise TaxAuthorityError("HMRC API did not respond in time.") from exc
        except httpx.RequestError as exc:
            logger.warning("HMRC %s %s failed: %s", method, path, exc)
            raise TaxAuthorityError(f"HMRC API request failed: {exc}") from exc

        if response.is_error:
            logger.warning("HMRC %s %s rejected with status %s", method, path, response.status_code)
            raise TaxAuthorityError(
                _upstream_message(response),
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise TaxAuthorityError(
                "Invalid JSON response from HMRC API.", status_code=response.status_code, body=response.text
            ) from exc

    def get_obligations(
        self,
        vrn: str,
        date_from: date,
        date_to: date,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Flattened obligation details: periodKey, start, end, due, status, received."""
        params = {"from": date_from.isoformat(), "to": date_to.isoformat()}
        if status:
            params["status"] = status
        data = self._request("GET", f"/organisations/vat/{vrn}/obligations", params=params)
        details: List[Dict[str, Any]] = []
        for obligation in data.get("obligations", []):
            # Older sandbox responses nest periods under obligationDetails.
            if "obligationDetails" in obligation:
                details.extend(obligation["obligationDetails"])
            else:
                details.append(obligation)
        return details

    def submit_return(self, vrn: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Submitting VAT return for period %s", payload.get("periodKey"))
        return self._request("POST", f"/organisations/vat/{vrn}/returns", json=payload)
