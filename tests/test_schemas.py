import json
from urllib.parse import quote

import pytest
from pydantic import ValidationError

from salon_api.schemas import IssueTokenRequest, RedeemRequest, parse_services


def test_services_list_passes_through():
    assert parse_services(["Kesim", "Boya"]) == ["Kesim", "Boya"]


def test_services_percent_encoded_json():
    assert parse_services(quote(json.dumps(["Kesim", "Boya"]))) == ["Kesim", "Boya"]


def test_services_unparseable_string_is_kept_whole():
    assert parse_services("Kesim, Boya") == ["Kesim, Boya"]


def test_services_json_scalar_is_kept_whole():
    assert parse_services('"Kesim"') == ['"Kesim"']


@pytest.mark.parametrize("raw", [None, "", [], "[]"])
def test_services_empty_values_become_none(raw):
    assert parse_services(raw) is None


def test_redeem_request_without_token():
    data = RedeemRequest.model_validate({})
    assert data.token is None
    assert data.services is None


def test_issue_request_uses_camel_case_aliases():
    data = IssueTokenRequest.model_validate({"customerId": 4, "issuerId": 2, "services": "Fön"})
    assert (data.customer_id, data.issuer_id, data.services) == (4, 2, ["Fön"])


def test_issue_request_rejects_non_positive_ids():
    with pytest.raises(ValidationError):
        IssueTokenRequest.model_validate({"customerId": 0, "issuerId": 2})
