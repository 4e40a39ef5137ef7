from datetime import date

import httpx
import pytest
import respx

from ledgerbooks.exceptions import TaxAuthorityError
from ledgerbooks.vat.client import HMRC_ACCEPT, HmrcVatClient

BASE_URL = "https://hmrc.test"
VRN = "123456789"


def _client():
    return HmrcVatClient(access_token=lambda: "secret-token", base_url=BASE_URL, timeout=5)


def test_get_obligations_sends_headers_and_params():
    with respx.mock(base_url=BASE_URL) as respx_mock:
        route = respx_mock.get(f"/organisations/vat/{VRN}/obligations").mock(
            return_value=httpx.Response(
                200,
                json={
                    "obligations": [
                        {"periodKey": "24A1", "start": "2024-01-01", "end": "2024-03-31", "due": "2024-05-07", "status": "O"}
                    ]
                },
            )
        )

        details = _client().get_obligations(VRN, date(2024, 1, 1), date(2024, 12, 31), "O")

        assert details[0]["periodKey"] == "24A1"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.headers["Accept"] == HMRC_ACCEPT
        assert request.url.params["from"] == "2024-01-01"
        assert request.url.params["status"] == "O"


def test_nested_obligation_details_are_flattened():
    with respx.mock(base_url=BASE_URL) as respx_mock:
        respx_mock.get(f"/organisations/vat/{VRN}/obligations").mock(
            return_value=httpx.Response(
                200,
                json={"obligations": [{"obligationDetails": [{"periodKey": "A"}, {"periodKey": "B"}]}]},
            )
        )
        details = _client().get_obligations(VRN, date(2024, 1, 1), date(2024, 12, 31))
        assert [detail["periodKey"] for detail in details] == ["A", "B"]


def test_rejection_carries_upstream_message():
    with respx.mock(base_url=BASE_URL) as respx_mock:
        respx_mock.post(f"/organisations/vat/{VRN}/returns").mock(
            return_value=httpx.Response(403, json={"code": "DUPLICATE_SUBMISSION", "message": "The VAT return was already submitted for the given period."})
        )
        with pytest.raises(TaxAuthorityError) as excinfo:
            _client().submit_return(VRN, {"periodKey": "24A1"})
        assert str(excinfo.value) == "The VAT return was already submitted for the given period."
        assert excinfo.value.status_code == 403


def test_timeout_is_not_retried():
    with respx.mock(base_url=BASE_URL) as respx_mock:
        route = respx_mock.post(f"/organisations/vat/{VRN}/returns").mock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(TaxAuthorityError):
            _client().submit_return(VRN, {"periodKey": "24A1"})
        assert route.call_count == 1
