"""
Test Record Endpoints
"""

from donor_portal.utils.exceptions import SalesforceAPIException

OPPORTUNITY_ID = "006000000000001AAA"


def test_create_contact_hashes_password(test_client, mock_salesforce_service):
    response = test_client.post(
        "/api/contact",
        json={
            "LastName": "Doe",
            "Email": "jane@example.com",
            "Password__c": "S3cret!",
            "Title": "Dr",
            "npe01__HomeEmail__c": "jane.home@example.com",
        },
    )

    assert response.status_code == 201
    payload = mock_salesforce_service.create_record.call_args.args[1]
    assert payload["LastName"] == "Doe"
    assert payload["Password__c"].startswith("pbkdf2_sha256$")
    assert payload["Title"] == "Dr"
    assert payload["npe01__HomeEmail__c"] == "jane.home@example.com"


def test_create_opportunity_forwards_every_field(test_client, mock_salesforce_service):
    mock_salesforce_service.create_record.return_value = {"id": OPPORTUNITY_ID, "success": True}

    response = test_client.post(
        "/api/opportunity",
        json={
            "Name": "Gala",
            "Amount": 250,
            "StageName": "Payment Pending",
            "CloseDate": "2024-05-01",
            "Description": "table 4",
            "Payment_Method__c": "card",
        },
    )

    assert response.status_code == 201
    assert response.json()["data"]["id"] == OPPORTUNITY_ID
    mock_salesforce_service.create_record.assert_awaited_once_with(
        "Opportunity",
        {
            "Name": "Gala",
            "Amount": 250.0,
            "StageName": "Payment Pending",
            "CloseDate": "2024-05-01",
            "Description": "table 4",
            "Payment_Method__c": "card",
        },
    )


def test_update_opportunity(test_client, mock_salesforce_service):
    response = test_client.patch(
        f"/api/opportunity/{OPPORTUNITY_ID}",
        json={"StageName": "Closed Won", "Gateway_Reference__c": "pi_123"},
    )

    assert response.status_code == 200
    mock_salesforce_service.update_record.assert_awaited_once_with(
        "Opportunity",
        OPPORTUNITY_ID,
        {"StageName": "Closed Won", "Gateway_Reference__c": "pi_123"},
    )


def test_create_donation_summary(test_client, mock_salesforce_service):
    response = test_client.post(
        "/api/donationsummary",
        json={
            "Opportunity__c": OPPORTUNITY_ID,
            "Campaign_Name__c": "Education",
            "Amount__c": 50,
            "Dedication__c": "In memory of A. Doe",
        },
    )

    assert response.status_code == 201
    payload = mock_salesforce_service.create_record.call_args.args[1]
    assert payload["Dedication__c"] == "In memory of A. Doe"


def test_create_donation_summary_requires_opportunity(test_client, mock_salesforce_service):
    response = test_client.post("/api/donationsummary", json={"Amount__c": 50})

    assert response.status_code == 422
    mock_salesforce_service.create_record.assert_not_called()


def test_create_opportunity_upstream_failure(test_client, mock_salesforce_service):
    error_body = [{"errorCode": "FIELD_CUSTOM_VALIDATION_EXCEPTION"}]
    mock_salesforce_service.create_record.side_effect = SalesforceAPIException(
        "Salesforce API error", status_code=400, details={"error": error_body}
    )

    response = test_client.post("/api/opportunity", json={"Name": "Gala"})

    assert response.status_code == 500
    assert response.json() == {
        "message": "Failed to create opportunity",
        "error": error_body,
        "success": False,
    }
