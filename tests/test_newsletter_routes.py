"""
Test Newsletter Endpoint
"""

import pytest

from donor_portal.handlers.newsletter_handler import get_client_ip


@pytest.mark.parametrize(
    "forwarded_for, peer, expected",
    [
        ("203.0.113.7, 10.0.0.1", "10.0.0.2", "203.0.113.7"),
        ("203.0.113.7", None, "203.0.113.7"),
        (None, "10.0.0.2", "10.0.0.2"),
        (" , 10.0.0.1", "10.0.0.2", "10.0.0.2"),
        (None, None, None),
    ],
)
def test_get_client_ip(forwarded_for, peer, expected):
    assert get_client_ip(forwarded_for, peer) == expected


def test_subscribe(test_client, mock_salesforce_service):
    response = test_client.post(
        "/api/newsletter",
        json={"SubscriberEmail": "jane@example.com"},
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )

    assert response.status_code == 201
    assert response.json()["message"] == "Subscribed Successfully."
    mock_salesforce_service.create_record.assert_awaited_once_with(
        "Newsletter__c",
        {"Subscriber_Email__c": "jane@example.com", "Subscriber_IP_Address__c": "203.0.113.7"},
    )


def test_subscribe_uses_peer_address(test_client, mock_salesforce_service):
    response = test_client.post("/api/newsletter", json={"SubscriberEmail": "jane@example.com"})

    assert response.status_code == 201
    payload = mock_salesforce_service.create_record.call_args.args[1]
    assert payload["Subscriber_IP_Address__c"] == "testclient"


def test_already_subscribed(test_client, mock_salesforce_service):
    mock_salesforce_service.query_first.return_value = {"Id": "a02000000000001AAA"}

    response = test_client.post("/api/newsletter", json={"SubscriberEmail": "jane@example.com"})

    assert response.status_code == 400
    assert response.json() == {"message": "Already Subscribed!", "success": False}
    mock_salesforce_service.create_record.assert_not_called()
