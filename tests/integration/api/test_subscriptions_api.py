"""
API tests for subscribing and confirming.

Real SQLite database (temporary file), DevEmailAdapter capturing the
confirmation emails.
"""

import re
import sqlite3

import pytest

VALID_BODY = "name=le%20guin&email=ursula_le_guin%40gmail.com"
FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


def _fetch_subscriptions(db_path: str) -> list[tuple[str, str, str]]:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute("SELECT email, name, status FROM subscriptions").fetchall()
    finally:
        conn.close()


def _confirmation_links(email) -> tuple[str, str]:
    html_links = re.findall(r'href="([^"]+)"', email.html_body)
    text_links = re.findall(r"(https?://\S+)", email.text_body)
    assert len(html_links) == 1
    assert len(text_links) == 1
    return html_links[0], text_links[0]


def _subscribe_and_get_link(client, email_adapter) -> str:
    response = client.post("/subscriptions", content=VALID_BODY, headers=FORM_HEADERS)
    assert response.status_code == 200
    html_link, _ = _confirmation_links(email_adapter.get_last_email())
    return html_link


# --- POST /subscriptions ---


def test_subscribe_returns_200_for_valid_form(client, db_path):
    response = client.post("/subscriptions", content=VALID_BODY, headers=FORM_HEADERS)

    assert response.status_code == 200
    assert response.content == b""


def test_subscribe_persists_pending_subscriber(client, db_path):
    client.post("/subscriptions", content=VALID_BODY, headers=FORM_HEADERS)

    assert _fetch_subscriptions(db_path) == [
        ("ursula_le_guin@gmail.com", "le guin", "pending_confirmation")
    ]


def test_subscribe_sends_one_confirmation_email(client, email_adapter):
    client.post("/subscriptions", content=VALID_BODY, headers=FORM_HEADERS)

    assert email_adapter.email_count == 1
    email = email_adapter.get_last_email()
    assert email.recipient == "ursula_le_guin@gmail.com"

    html_link, text_link = _confirmation_links(email)
    assert html_link == text_link
    assert html_link.startswith("http://127.0.0.1:8000/subscriptions/confirm?subscription_token=")


@pytest.mark.parametrize(
    "body,description",
    [
        ("name=le%20guin", "missing the email"),
        ("email=ursula_le_guin%40gmail.com", "missing the name"),
        ("", "missing both name and email"),
    ],
)
def test_subscribe_returns_400_when_data_is_missing(client, body, description):
    response = client.post("/subscriptions", content=body, headers=FORM_HEADERS)

    assert response.status_code == 400, f"Did not fail with 400 when the payload was {description}"


@pytest.mark.parametrize(
    "body,description",
    [
        ("name=&email=ursula_le_guin%40gmail.com", "empty name"),
        ("name=%20%20&email=ursula_le_guin%40gmail.com", "whitespace-only name"),
        ("name=Ursula&email=", "empty email"),
        ("name=Ursula&email=definitely-not-an-email", "invalid email"),
        ("name=%3Cscript%3E&email=ursula_le_guin%40gmail.com", "forbidden characters"),
    ],
)
def test_subscribe_returns_400_when_fields_are_invalid(client, email_adapter, db_path, body, description):
    response = client.post("/subscriptions", content=body, headers=FORM_HEADERS)

    assert response.status_code == 400, f"Did not return 400 for {description}"
    assert email_adapter.attempts == 0
    assert _fetch_subscriptions(db_path) == []


def test_subscribe_returns_500_when_email_fails(client, email_adapter, db_path):
    email_adapter.fail_for.add("ursula_le_guin@gmail.com")

    response = client.post("/subscriptions", content=VALID_BODY, headers=FORM_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    # Committed before the send; stays pending.
    assert _fetch_subscriptions(db_path)[0][2] == "pending_confirmation"


def test_subscribe_returns_500_for_duplicate_email(client):
    client.post("/subscriptions", content=VALID_BODY, headers=FORM_HEADERS)

    response = client.post("/subscriptions", content=VALID_BODY, headers=FORM_HEADERS)

    assert response.status_code == 500


def test_subscribe_fails_when_token_table_is_missing(client, db_path, email_adapter):
    conn = sqlite3.connect(db_path)
    conn.execute("DROP TABLE subscription_tokens")
    conn.commit()
    conn.close()

    response = client.post("/subscriptions", content=VALID_BODY, headers=FORM_HEADERS)

    assert response.status_code == 500
    # The subscriber insert was rolled back with the failed token insert.
    assert _fetch_subscriptions(db_path) == []
    assert email_adapter.attempts == 0


# --- GET /subscriptions/confirm ---


def test_confirm_without_token_is_rejected_with_400(client):
    response = client.get("/subscriptions/confirm")

    assert response.status_code == 400


def test_confirm_with_unknown_token_returns_401(client):
    response = client.get(
        "/subscriptions/confirm", params={"subscription_token": "aaaaaaaaaaaaaaaaaaaaaaaaa"}
    )

    assert response.status_code == 401


def test_link_returned_by_subscribe_returns_200(client, email_adapter):
    link = _subscribe_and_get_link(client, email_adapter)

    response = client.get(link)

    assert response.status_code == 200


def test_clicking_on_the_confirmation_link_confirms_a_subscriber(client, email_adapter, db_path):
    link = _subscribe_and_get_link(client, email_adapter)

    client.get(link).raise_for_status()

    assert _fetch_subscriptions(db_path) == [
        ("ursula_le_guin@gmail.com", "le guin", "confirmed")
    ]


def test_confirming_twice_returns_200_both_times(client, email_adapter, db_path):
    link = _subscribe_and_get_link(client, email_adapter)

    assert client.get(link).status_code == 200
    assert client.get(link).status_code == 200
    assert _fetch_subscriptions(db_path)[0][2] == "confirmed"


# --- Misc ---


def test_health_check_works(client):
    response = client.get("/health_check")

    assert response.status_code == 200
    assert response.content == b""


def test_request_id_is_accepted(client):
    response = client.get(
        "/subscriptions/confirm",
        params={"subscription_token": "unknown"},
        headers={"X-Request-Id": "req-123"},
    )

    assert response.status_code == 401
