"""
Test Portal Account Endpoints

Registration, login, activation and password reset against a mocked
Salesforce service.
"""

import base64
from unittest.mock import patch

import pytest

from donor_portal.utils.exceptions import SalesforceAPIException, SalesforceAuthException
from donor_portal.utils.passwords import hash_password
from donor_portal.utils.tokens import encode_email

RECORD_TYPE = {"Id": "012000000000001AAA"}
RESET_TOKEN = "a" * 64


@pytest.fixture
def register_body():
    return {
        "firstname": "Jane",
        "lastname": "Doe",
        "emailid": "jane.doe@example.com",
        "usernumber": "+15555550100",
        "userpwd": "S3cret!",
        "userconfirmPassword": "S3cret!",
    }


def _login_record(contact_id, password="S3cret!", **overrides):
    record = {
        "Id": contact_id,
        "Password__c": hash_password(password),
        "Is_Email_Verify__c": True,
        "CHF_Account_Status__c": "Approve",
        "FirstName": "Jane",
        "LastName": "Doe",
    }
    record.update(overrides)
    return record


def test_authenticated_route_waits_for_token(test_client, mock_salesforce_service, mock_salesforce_oauth):
    test_client.post("/api/auth/login", json={"email": "jane@example.com", "password": "x"})

    mock_salesforce_oauth.get_access_token.assert_awaited()


def test_token_failure_is_reported(test_client, mock_salesforce_service, mock_salesforce_oauth):
    mock_salesforce_oauth.get_access_token.side_effect = SalesforceAuthException(
        "Failed to refresh Salesforce access token",
        details={"error": {"error": "invalid_grant"}},
    )

    response = test_client.post("/api/auth/login", json={"email": "jane@example.com", "password": "x"})

    assert response.status_code == 500
    data = response.json()
    assert data["message"] == "Salesforce authentication error"
    assert data["success"] is False
    assert data["error"]["auth_failed"] is True
    mock_salesforce_service.query_first.assert_not_called()


def test_register_password_mismatch(test_client, mock_salesforce_service, register_body):
    register_body["userconfirmPassword"] = "different"

    response = test_client.post("/api/auth/register", json=register_body)

    assert response.status_code == 400
    assert response.json() == {"message": "Passwords do not match", "success": False}
    mock_salesforce_service.query_first.assert_not_called()
    mock_salesforce_service.create_record.assert_not_called()


def test_register_existing_email(test_client, mock_salesforce_service, register_body, contact_id):
    mock_salesforce_service.query_first.side_effect = [RECORD_TYPE, {"Id": contact_id}]

    response = test_client.post("/api/auth/register", json=register_body)

    assert response.status_code == 400
    assert response.json()["message"] == "Email already exists"
    mock_salesforce_service.create_record.assert_not_called()


def test_register_success(test_client, mock_salesforce_service, register_body):
    mock_salesforce_service.query_first.side_effect = [RECORD_TYPE, None]

    response = test_client.post("/api/auth/register", json=register_body)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["activationLink"].startswith("https://portal.example.org/activate/")

    sobject, payload = mock_salesforce_service.create_record.call_args.args
    assert sobject == "Contact"
    assert payload["Email"] == "jane.doe@example.com"
    assert payload["Phone"] == "+15555550100"
    assert payload["Password__c"].startswith("pbkdf2_sha256$")
    assert "S3cret!" not in payload["Password__c"]
    assert payload["Activate_Link__c"] == data["activationLink"]


def test_register_household_lookup_is_escaped(test_client, mock_salesforce_service, register_body):
    register_body["emailid"] = "x' OR Email != '"
    mock_salesforce_service.query_first.side_effect = [RECORD_TYPE, None]

    test_client.post("/api/auth/register", json=register_body)

    soql = mock_salesforce_service.query_first.call_args_list[1].args[0]
    assert "Email = 'x\\' OR Email != \\''" in soql


def test_register_upstream_failure(test_client, mock_salesforce_service, register_body):
    error_body = [{"errorCode": "REQUIRED_FIELD_MISSING", "message": "Required fields are missing"}]
    mock_salesforce_service.query_first.side_effect = [RECORD_TYPE, None]
    mock_salesforce_service.create_record.side_effect = SalesforceAPIException(
        "Salesforce API error", status_code=400, details={"error": error_body}
    )

    response = test_client.post("/api/auth/register", json=register_body)

    assert response.status_code == 500
    assert response.json() == {"message": "Registration failed", "error": error_body, "success": False}


def test_login_unknown_user(test_client, mock_salesforce_service):
    response = test_client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "x"})

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


@pytest.mark.parametrize(
    "overrides",
    [
        {"CHF_Account_Status__c": "Reject"},
        {"CHF_Account_Status__c": None},
        {"Is_Email_Verify__c": False},
    ],
)
def test_login_requires_approved_and_verified(test_client, mock_salesforce_service, contact_id, overrides):
    mock_salesforce_service.query_first.return_value = _login_record(contact_id, **overrides)

    with patch("donor_portal.handlers.auth_handler.verify_password") as mock_verify:
        response = test_client.post(
            "/api/auth/login", json={"email": "jane@example.com", "password": "S3cret!"}
        )

    assert response.status_code == 403
    assert response.json()["message"] == "Account not verified or approved"
    mock_verify.assert_not_called()


def test_login_wrong_password(test_client, mock_salesforce_service, contact_id):
    mock_salesforce_service.query_first.return_value = _login_record(contact_id)

    response = test_client.post("/api/auth/login", json={"email": "jane@example.com", "password": "nope"})

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid credentials", "success": False}


def test_login_success(test_client, mock_salesforce_service, contact_id):
    mock_salesforce_service.query_first.return_value = _login_record(contact_id)

    response = test_client.post(
        "/api/auth/login", json={"email": "jane@example.com", "password": "S3cret!"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["data"]["userId"] == contact_id
    assert data["data"]["firstName"] == "Jane"
    mock_salesforce_service.update_record.assert_not_called()


def test_login_upgrades_legacy_password(test_client, mock_salesforce_service, contact_id):
    legacy = base64.b64encode(b"S3cret!").decode("ascii")
    mock_salesforce_service.query_first.return_value = _login_record(contact_id, Password__c=legacy)

    response = test_client.post(
        "/api/auth/login", json={"email": "jane@example.com", "password": "S3cret!"}
    )

    assert response.status_code == 200
    sobject, record_id, payload = mock_salesforce_service.update_record.call_args.args
    assert (sobject, record_id) == ("Contact", contact_id)
    assert payload["Password__c"].startswith("pbkdf2_sha256$")


def test_login_succeeds_when_upgrade_fails(test_client, mock_salesforce_service, contact_id):
    legacy = base64.b64encode(b"S3cret!").decode("ascii")
    mock_salesforce_service.query_first.return_value = _login_record(contact_id, Password__c=legacy)
    mock_salesforce_service.update_record.side_effect = SalesforceAPIException(
        "Salesforce API error", status_code=400, details={"error": []}
    )

    response = test_client.post(
        "/api/auth/login", json={"email": "jane@example.com", "password": "S3cret!"}
    )

    assert response.status_code == 200


def test_activate_success(test_client, mock_salesforce_service, contact_id):
    email = "jane@example.com"
    token = "a" * 64
    mock_salesforce_service.query_first.return_value = {
        "Id": contact_id,
        "Is_Email_Verify__c": False,
        "Activate_Link__c": f"https://portal.example.org/activate/{encode_email(email)}/{token}",
    }

    response = test_client.get(f"/activate/{encode_email(email)}/{token}")

    assert response.status_code == 201
    assert response.json()["message"] == "Email activation successful"
    mock_salesforce_service.update_record.assert_awaited_once_with(
        "Contact", contact_id, {"Is_Email_Verify__c": True}
    )


def test_activate_rejects_foreign_token(test_client, mock_salesforce_service, contact_id):
    email = "jane@example.com"
    mock_salesforce_service.query_first.return_value = {
        "Id": contact_id,
        "Is_Email_Verify__c": False,
        "Activate_Link__c": f"https://portal.example.org/activate/{encode_email(email)}/{'a' * 64}",
    }

    response = test_client.get(f"/activate/{encode_email(email)}/{'b' * 64}")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid Link."
    mock_salesforce_service.update_record.assert_not_called()


def test_activate_already_verified(test_client, mock_salesforce_service, contact_id):
    mock_salesforce_service.query_first.return_value = {
        "Id": contact_id,
        "Is_Email_Verify__c": True,
        "Activate_Link__c": None,
    }

    response = test_client.get(f"/activate/{encode_email('jane@example.com')}/token")

    assert response.status_code == 400


def test_activate_undecodable_link(test_client, mock_salesforce_service):
    response = test_client.get("/activate/a/token")

    assert response.status_code == 400
    mock_salesforce_service.query_first.assert_not_called()


def test_check_email_issues_reset_link(test_client, mock_salesforce_service, contact_id):
    mock_salesforce_service.query_first.side_effect = [
        RECORD_TYPE,
        {"Id": contact_id, "CHF_Account_Status__c": "Approve", "Is_Email_Verify__c": True},
    ]

    response = test_client.post("/api/auth/check-email", json={"forgot_email": "jane@example.com"})

    assert response.status_code == 200
    link = response.json()["link"]
    assert link.startswith("https://portal.example.org/reset-password/")
    mock_salesforce_service.update_record.assert_awaited_once_with(
        "Contact", contact_id, {"Reset_Pwd_Link__c": link}
    )


@pytest.mark.parametrize(
    "record, message",
    [
        ({"CHF_Account_Status__c": "Reject", "Is_Email_Verify__c": True}, "User is locked"),
        ({"CHF_Account_Status__c": "Approve", "Is_Email_Verify__c": False}, "Email not verified"),
    ],
)
def test_check_email_forbidden(test_client, mock_salesforce_service, contact_id, record, message):
    mock_salesforce_service.query_first.side_effect = [RECORD_TYPE, {"Id": contact_id, **record}]

    response = test_client.post("/api/auth/check-email", json={"forgot_email": "jane@example.com"})

    assert response.status_code == 403
    assert response.json()["message"] == message


def test_check_email_not_registered(test_client, mock_salesforce_service):
    mock_salesforce_service.query_first.side_effect = [RECORD_TYPE, None]

    response = test_client.post("/api/auth/check-email", json={"forgot_email": "nobody@example.com"})

    assert response.status_code == 404
    assert response.json()["message"] == "Email not registered"


def test_reset_password(test_client, mock_salesforce_service, contact_id):
    mock_salesforce_service.query_first.return_value = {"Id": contact_id}

    response = test_client.post(
        "/api/auth/reset-password",
        json={"email": "jane@example.com", "newPassword": "N3w!", "confirmPassword": "N3w!"},
    )

    assert response.status_code == 200
    payload = mock_salesforce_service.update_record.call_args.args[2]
    assert payload["Password__c"].startswith("pbkdf2_sha256$")


def test_reset_password_unknown_email(test_client, mock_salesforce_service):
    response = test_client.post(
        "/api/auth/reset-password",
        json={"email": "nobody@example.com", "newPassword": "N3w!", "confirmPassword": "N3w!"},
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Invalid credentials"


def test_forgot_password_from_link(test_client, mock_salesforce_service, contact_id):
    mock_salesforce_service.query_first.return_value = {
        "Id": contact_id,
        "Reset_Pwd_Link__c": f"https://portal.example.org/reset-password/uid/{RESET_TOKEN}",
    }

    response = test_client.post(
        "/api/auth/forgot-password",
        json={
            "uidb64": encode_email("jane@example.com"),
            "token": RESET_TOKEN,
            "newPassword": "N3w!",
            "confirmPassword": "N3w!",
        },
    )

    assert response.status_code == 200
    soql = mock_salesforce_service.query_first.call_args.args[0]
    assert "'jane@example.com'" in soql
    payload = mock_salesforce_service.update_record.call_args.args[2]
    assert payload["Password__c"].startswith("pbkdf2_sha256$")
    assert payload["Reset_Pwd_Link__c"] == ""


@pytest.mark.parametrize(
    "issued_link",
    [None, "https://portal.example.org/reset-password/uid/someothertoken"],
)
def test_forgot_password_rejects_unissued_token(
    test_client, mock_salesforce_service, contact_id, issued_link
):
    mock_salesforce_service.query_first.return_value = {
        "Id": contact_id,
        "Reset_Pwd_Link__c": issued_link,
    }

    response = test_client.post(
        "/api/auth/forgot-password",
        json={
            "uidb64": encode_email("jane@example.com"),
            "token": RESET_TOKEN,
            "newPassword": "N3w!",
            "confirmPassword": "N3w!",
        },
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Invalid reset link"
    mock_salesforce_service.update_record.assert_not_called()


def test_forgot_password_mismatch(test_client, mock_salesforce_service):
    response = test_client.post(
        "/api/auth/forgot-password",
        json={
            "uidb64": encode_email("jane@example.com"),
            "token": RESET_TOKEN,
            "newPassword": "a",
            "confirmPassword": "b",
        },
    )

    assert response.status_code == 400
    mock_salesforce_service.query_first.assert_not_called()
