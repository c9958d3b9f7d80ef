"""
Test Profile Endpoints
"""

from donor_portal.utils.exceptions import SalesforceAPIException


def _contact(contact_id, account_id, **overrides):
    contact = {
        "Id": contact_id,
        "Email": "jane@example.com",
        "FirstName": "Jane",
        "LastName": "Doe",
        "Phone": "+15555550100",
        "MobilePhone": None,
        "AccountId": account_id,
    }
    contact.update(overrides)
    return contact


def _account(account_id, **overrides):
    account = {"Id": account_id}
    for prefix in ("Billing", "Shipping"):
        account.update(
            {
                f"{prefix}Street": "1 Main St",
                f"{prefix}City": "Springfield",
                f"{prefix}State": "IL",
                f"{prefix}PostalCode": "62701",
                f"{prefix}Country": "USA",
            }
        )
    account.update(overrides)
    return account


def test_get_contact_profile(test_client, mock_salesforce_service, contact_id, account_id):
    mock_salesforce_service.query_first.side_effect = [
        _contact(contact_id, account_id),
        _account(account_id),
    ]

    response = test_client.get("/api/contact", params={"email": "jane@example.com"})

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == contact_id
    assert data["firstName"] == "Jane"
    assert data["billingCity"] == "Springfield"
    assert data["sameAddress"] is True
    # Falls back to Phone when MobilePhone is empty
    assert data["mobile"] == "+15555550100"


def test_get_contact_prefers_mobile_phone(test_client, mock_salesforce_service, contact_id, account_id):
    mock_salesforce_service.query_first.side_effect = [
        _contact(contact_id, account_id, MobilePhone="+15555550199"),
        _account(account_id, ShippingCity="Chicago"),
    ]

    data = test_client.get("/api/contact", params={"email": "jane@example.com"}).json()

    assert data["mobile"] == "+15555550199"
    assert data["sameAddress"] is False


def test_get_contact_not_found(test_client, mock_salesforce_service):
    response = test_client.get("/api/contact", params={"email": "nobody@example.com"})

    assert response.status_code == 404
    assert response.json() == {"message": "User not found", "success": False}


def test_get_contact_requires_email(test_client, mock_salesforce_service):
    assert test_client.get("/api/contact").status_code == 422


def test_update_profile(test_client, mock_salesforce_service, contact_id):
    response = test_client.post(
        "/api/profile/update",
        json={"Id": contact_id, "firstName": "Janet", "lastName": "Doe", "mobile": "+15555550111"},
    )

    assert response.status_code == 200
    assert response.json()["userData"]["firstName"] == "Janet"
    mock_salesforce_service.update_record.assert_awaited_once_with(
        "Contact",
        contact_id,
        {"FirstName": "Janet", "LastName": "Doe", "MobilePhone": "+15555550111"},
    )


def test_update_address(test_client, mock_salesforce_service, contact_id, account_id):
    mock_salesforce_service.query_first.return_value = {"Id": contact_id, "AccountId": account_id}

    response = test_client.patch(
        "/api/profile/address",
        json={"contactId": contact_id, "billingCity": "Springfield", "shippingCity": "Chicago"},
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Address updated successfully"
    mock_salesforce_service.update_record.assert_awaited_once_with(
        "Account", account_id, {"BillingCity": "Springfield", "ShippingCity": "Chicago"}
    )


def test_update_address_without_account(test_client, mock_salesforce_service, contact_id):
    response = test_client.patch("/api/profile/address", json={"contactId": contact_id})

    assert response.status_code == 404
    assert response.json()["message"] == "Account not found."
    mock_salesforce_service.update_record.assert_not_called()


def test_update_profile_upstream_failure(test_client, mock_salesforce_service, contact_id):
    mock_salesforce_service.update_record.side_effect = SalesforceAPIException(
        "Salesforce API error",
        status_code=404,
        details={"error": [{"errorCode": "NOT_FOUND"}]},
    )

    response = test_client.post("/api/profile/update", json={"Id": contact_id, "firstName": "Jane"})

    assert response.status_code == 500
    assert response.json()["error"] == [{"errorCode": "NOT_FOUND"}]
