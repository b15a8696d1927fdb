import json

import pytest

from push_gateway.errors import ConfigError
from push_gateway.firebase import load_service_account


def test_load_service_account(service_account_json):
    cert = load_service_account(service_account_json)
    assert cert["project_id"] == "push-gateway-test"


def test_load_double_encoded_service_account(service_account_json):
    cert = load_service_account(json.dumps(service_account_json))
    assert cert["project_id"] == "push-gateway-test"


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_missing_service_account(raw):
    with pytest.raises(ConfigError, match="not set"):
        load_service_account(raw)


def test_malformed_service_account():
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_service_account("{project_id: nope")


def test_service_account_not_an_object():
    with pytest.raises(ConfigError, match="JSON object"):
        load_service_account("[1, 2]")


def test_service_account_without_project_id():
    with pytest.raises(ConfigError, match="project_id"):
        load_service_account(json.dumps({"type": "service_account"}))
