"""
Subscriptions component unit tests.

Covers:
- Name and email validation errors are collected per field
- Subscriber and token are written in one committed transaction
- Any failing storage step rolls back and names the step
- The confirmation email carries the same link in both bodies
- A failed send after commit is reported
"""

from __future__ import annotations

import re
from types import TracebackType
from uuid import UUID

import pytest

from newsletter_service.components.subscriptions import (
    RegistrarConfig,
    SubscribeInput,
    build_confirmation_email,
    build_confirmation_url,
    parse_new_subscriber,
    run,
    run_subscribe,
)
from newsletter_service.domain import (
    ConfirmationToken,
    PoolTimeoutError,
    StorageError,
    Subscriber,
    SubscriberEmail,
    SubscriberStatus,
    UnexpectedError,
)
from newsletter_service.ports.email import EmailResult

# --- Mocks ---


class MockTransaction:
    def __init__(self, store: MockSubscriptionStore) -> None:
        self.store = store
        self.subscribers: list[Subscriber] = []
        self.tokens: list[ConfirmationToken] = []
        self.committed = False
        self.rolled_back = False
        self.exited = False

    def __enter__(self) -> MockTransaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if not self.committed:
            self.rollback()
        self.exited = True

    def insert_subscriber(self, subscriber: Subscriber) -> None:
        if self.store.fail_on == "insert_subscriber":
            raise StorageError("UNIQUE constraint failed: subscriptions.email")
        self.subscribers.append(subscriber)

    def store_token(self, token: ConfirmationToken) -> None:
        if self.store.fail_on == "store_token":
            raise StorageError("disk I/O error")
        self.tokens.append(token)

    def commit(self) -> None:
        if self.store.fail_on == "commit":
            raise StorageError("database is locked")
        self.committed = True
        self.store.subscribers.extend(self.subscribers)
        self.store.tokens.extend(self.tokens)

    def rollback(self) -> None:
        self.rolled_back = True


class MockSubscriptionStore:
    def __init__(self) -> None:
        self.subscribers: list[Subscriber] = []
        self.tokens: list[ConfirmationToken] = []
        self.transactions: list[MockTransaction] = []
        self.fail_on: str | None = None

    def begin(self) -> MockTransaction:
        if self.fail_on == "acquire_connection":
            raise PoolTimeoutError(2.0)
        transaction = MockTransaction(self)
        self.transactions.append(transaction)
        return transaction


class MockEmailSender:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict[str, str]] = []

    def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> EmailResult:
        if self.fail:
            return EmailResult.failed(recipient.as_ref(), "HTTPStatusError: 500")
        self.sent.append(
            {"to": recipient.as_ref(), "subject": subject, "html": html_body, "text": text_body}
        )
        return EmailResult.success(recipient.as_ref())


@pytest.fixture
def store() -> MockSubscriptionStore:
    return MockSubscriptionStore()


@pytest.fixture
def sender() -> MockEmailSender:
    return MockEmailSender()


VALID_INPUT = SubscribeInput(name="le guin", email="ursula_le_guin@gmail.com")
FIXED_TOKEN = "AbCdEfGhIjKlMnOpQrStUvWxY"


def _links(text: str) -> list[str]:
    return re.findall(r"https?://[^\s\"<>]+", text)


# --- Pure functions ---


class TestParseNewSubscriber:
    def test_valid(self) -> None:
        subscriber, errors = parse_new_subscriber(VALID_INPUT)

        assert errors == []
        assert subscriber is not None
        assert subscriber.status == SubscriberStatus.PENDING_CONFIRMATION
        assert subscriber.email.as_ref() == "ursula_le_guin@gmail.com"
        assert subscriber.name.as_ref() == "le guin"

    def test_invalid_name(self) -> None:
        subscriber, errors = parse_new_subscriber(
            SubscribeInput(name="", email="ursula_le_guin@gmail.com")
        )

        assert subscriber is None
        assert [e.code for e in errors] == ["INVALID_NAME"]
        assert errors[0].field == "name"

    def test_invalid_email(self) -> None:
        subscriber, errors = parse_new_subscriber(
            SubscribeInput(name="Ursula", email="definitely-not-an-email")
        )

        assert subscriber is None
        assert [e.code for e in errors] == ["INVALID_EMAIL"]

    def test_both_invalid_collects_both(self) -> None:
        _, errors = parse_new_subscriber(SubscribeInput(name="  ", email=""))

        assert {e.field for e in errors} == {"name", "email"}


class TestConfirmationEmail:
    def test_url(self) -> None:
        url = build_confirmation_url("http://127.0.0.1:8000/", FIXED_TOKEN)
        assert url == f"http://127.0.0.1:8000/subscriptions/confirm?subscription_token={FIXED_TOKEN}"

    def test_same_link_in_both_bodies(self) -> None:
        url = build_confirmation_url("https://news.example.com", FIXED_TOKEN)
        message = build_confirmation_email(url)

        assert message.subject == "Welcome!"
        assert _links(message.html_body) == [url]
        assert _links(message.text_body) == [url]


# --- Registrar ---


class TestRunSubscribe:
    def test_success_commits_and_sends(self, store, sender) -> None:
        result = run_subscribe(
            VALID_INPUT,
            store,
            sender,
            config=RegistrarConfig(base_url="https://news.example.com"),
            token_generator=lambda: FIXED_TOKEN,
        )

        assert result.success is True
        assert isinstance(result.subscriber_id, UUID)

        transaction = store.transactions[0]
        assert transaction.committed is True
        assert transaction.rolled_back is False
        assert transaction.exited is True

        assert len(store.subscribers) == 1
        assert store.tokens == [ConfirmationToken(FIXED_TOKEN, result.subscriber_id)]

        assert len(sender.sent) == 1
        email = sender.sent[0]
        assert email["to"] == "ursula_le_guin@gmail.com"
        expected = f"https://news.example.com/subscriptions/confirm?subscription_token={FIXED_TOKEN}"
        assert _links(email["html"]) == [expected]
        assert _links(email["text"]) == [expected]

    def test_invalid_input_touches_nothing(self, store, sender) -> None:
        result = run_subscribe(SubscribeInput(name="", email="nope"), store, sender)

        assert result.success is False
        assert len(result.errors) == 2
        assert store.transactions == []
        assert sender.sent == []

    def test_pool_exhausted(self, store, sender) -> None:
        store.fail_on = "acquire_connection"

        with pytest.raises(UnexpectedError) as exc_info:
            run_subscribe(VALID_INPUT, store, sender)

        assert exc_info.value.step == "acquire_connection"
        assert isinstance(exc_info.value.__cause__, PoolTimeoutError)
        assert sender.sent == []

    @pytest.mark.parametrize("step", ["insert_subscriber", "store_token", "commit"])
    def test_storage_failure_rolls_back(self, store, sender, step) -> None:
        store.fail_on = step

        with pytest.raises(UnexpectedError) as exc_info:
            run_subscribe(VALID_INPUT, store, sender)

        assert exc_info.value.step == step
        assert isinstance(exc_info.value.__cause__, StorageError)
        transaction = store.transactions[0]
        assert transaction.rolled_back is True
        assert transaction.exited is True
        assert store.subscribers == []
        assert store.tokens == []
        assert sender.sent == []

    def test_send_failure_after_commit(self, store) -> None:
        with pytest.raises(UnexpectedError) as exc_info:
            run_subscribe(VALID_INPUT, store, MockEmailSender(fail=True))

        assert exc_info.value.step == "send_confirmation_email"
        # Rows stay; the subscriber can be confirmed once an email gets through.
        assert len(store.subscribers) == 1
        assert store.transactions[0].committed is True

    def test_generated_token_shape(self, store, sender) -> None:
        run_subscribe(VALID_INPUT, store, sender)

        token = store.tokens[0].token
        assert len(token) == 25
        assert token.isalnum() and token.isascii()


class TestRunDispatch:
    def test_run_dispatches(self, store, sender) -> None:
        assert run(VALID_INPUT, store=store, email_sender=sender).success is True

    def test_run_rejects_unknown_input(self, store, sender) -> None:
        with pytest.raises(ValueError, match="Unknown input type"):
            run("bogus", store=store, email_sender=sender)  # type: ignore[arg-type]
