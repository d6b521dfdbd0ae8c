# tests/test_sheets_bridge.py

"""
Tests for the Apps Script bridge client: transport failures vs logical rejections.
"""

import pytest
import requests
from unittest.mock import Mock

from core.config import settings
from core.errors import BridgeRejected, BridgeTransportError
from core.sheets_bridge import SheetsBridge, get_sheets_bridge, ping_bridge


def make_bridge(json_body=None, status_code=200, side_effect=None, json_error=None):
    response = Mock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_body

    session = Mock()
    if side_effect is not None:
        session.post.side_effect = side_effect
    else:
        session.post.return_value = response

    return SheetsBridge("https://script.example.com/exec", token="secret", timeout=5, session=session)


# ------------------------------------------------------------
# Envelope
# ------------------------------------------------------------
def test_call_posts_function_args_and_token():
    bridge = make_bridge({"result": [{"RoleName": "Staff"}]})

    rows = bridge.list_roles()

    assert rows == [{"RoleName": "Staff"}]
    bridge.session.post.assert_called_once_with(
        "https://script.example.com/exec",
        json={"function": "getRoles", "args": [], "token": "secret"},
        timeout=5,
    )


def test_json_string_results_are_decoded():
    bridge = make_bridge({"result": '{"Tickets": ["TicketID", "Title"]}'})
    assert bridge.fetch_schema() == {"Tickets": ["TicketID", "Title"]}


def test_plain_string_results_are_kept():
    bridge = make_bridge({"result": "Saved"})
    assert bridge.call("saveRole", {}) == "Saved"


def test_empty_list_results_default_to_empty():
    bridge = make_bridge({"result": None})
    assert bridge.list_mappings() == []
    assert bridge.list_rows("Users") == []


# ------------------------------------------------------------
# Transport failures
# ------------------------------------------------------------
def test_network_error_is_transport_failure():
    bridge = make_bridge(side_effect=requests.ConnectionError("refused"))

    with pytest.raises(BridgeTransportError) as exc:
        bridge.list_roles()
    assert exc.value.function == "getRoles"


def test_http_error_is_transport_failure():
    bridge = make_bridge({"error": "nope"}, status_code=500)

    with pytest.raises(BridgeTransportError) as exc:
        bridge.list_mappings()
    assert "HTTP 500" in exc.value.message


def test_script_exception_is_transport_failure():
    bridge = make_bridge({"error": "TypeError: cannot read property"})

    with pytest.raises(BridgeTransportError) as exc:
        bridge.save_role({"RoleName": "Staff"})
    assert "TypeError" in exc.value.message


@pytest.mark.parametrize("body", [["not", "a", "dict"], "oops"])
def test_unexpected_body_is_transport_failure(body):
    with pytest.raises(BridgeTransportError):
        make_bridge(body).list_roles()


def test_non_json_body_is_transport_failure():
    with pytest.raises(BridgeTransportError):
        make_bridge(json_error=ValueError("no json")).list_roles()


# ------------------------------------------------------------
# Logical rejections
# ------------------------------------------------------------
@pytest.mark.parametrize("result", [False, {"success": False, "message": "Sheet locked"}])
def test_write_reporting_failure_is_rejected(result):
    bridge = make_bridge({"result": result})

    with pytest.raises(BridgeRejected) as exc:
        bridge.delete_role("Staff")
    assert not isinstance(exc.value, BridgeTransportError)


def test_rejection_carries_remote_message():
    bridge = make_bridge({"result": {"success": False, "message": "Sheet locked"}})

    with pytest.raises(BridgeRejected) as exc:
        bridge.save_mapping({"MappingID": "MAP-1"})
    assert exc.value.message == "Sheet locked"


@pytest.mark.parametrize("result", [True, {"success": True}, {"MappingID": "MAP-9"}])
def test_write_success_shapes(result):
    assert make_bridge({"result": result}).save_mapping({}) == result


def test_add_column_collision_is_a_result_not_an_error():
    bridge = make_bridge({"result": {"success": False, "message": "Column exists"}})

    assert bridge.add_column("Tickets", "Title") == {"success": False, "message": "Column exists"}


def test_add_column_bare_boolean():
    assert make_bridge({"result": True}).add_column("Tickets", "Room") == {"success": True, "message": ""}


# ------------------------------------------------------------
# Factory / ping
# ------------------------------------------------------------
def test_factory_needs_url(monkeypatch):
    monkeypatch.setattr(settings, "SHEETS_BRIDGE_URL", None)
    assert get_sheets_bridge() is None


def test_factory_uses_settings(monkeypatch):
    monkeypatch.setattr(settings, "SHEETS_BRIDGE_URL", "https://script.example.com/other")
    monkeypatch.setattr(settings, "SHEETS_BRIDGE_TOKEN", "tok")

    bridge = get_sheets_bridge()

    assert bridge.url == "https://script.example.com/other"
    assert bridge.token == "tok"


def test_ping_reports_column_counts():
    bridge = make_bridge({"result": {"Tickets": ["TicketID", "Title"], "Users": ["Email"]}})
    assert ping_bridge(bridge) == {
        "service": "Sheets",
        "status": "ok",
        "sheets": {"Tickets": 2, "Users": 1},
    }


def test_ping_reports_errors():
    bridge = make_bridge(side_effect=requests.Timeout("slow"))
    status = ping_bridge(bridge)

    assert status["status"] == "error"
    assert "slow" in status["detail"]


def test_ping_without_configuration(monkeypatch):
    monkeypatch.setattr(settings, "SHEETS_BRIDGE_URL", None)
    assert ping_bridge()["status"] == "not_configured"


@pytest.mark.parametrize(
    "result",
    [
        {"success": False, "message": "Roles sheet missing"},
        {"RoleName": "Staff"},
        "Roles sheet missing",
    ],
)
def test_list_reads_reject_non_list_results(result):
    bridge = make_bridge({"result": result})

    with pytest.raises(BridgeTransportError) as exc:
        bridge.list_roles()
    assert exc.value.function == "getRoles"
