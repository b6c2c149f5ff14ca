"""
Confirmation component unit tests.
"""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from newsletter_service.components.confirmation import ConfirmInput, run, run_confirm
from newsletter_service.domain import StorageError, SubscriberStatus, UnexpectedError


class MockConfirmationRepo:
    def __init__(self) -> None:
        self.tokens: dict[str, UUID] = {}
        self.statuses: dict[UUID, SubscriberStatus] = {}
        self.fail_on: str | None = None

    def add_pending(self, token: str) -> UUID:
        subscriber_id = uuid4()
        self.tokens[token] = subscriber_id
        self.statuses[subscriber_id] = SubscriberStatus.PENDING_CONFIRMATION
        return subscriber_id

    def get_subscriber_id_from_token(self, token: str) -> UUID | None:
        if self.fail_on == "get_subscriber_id_from_token":
            raise StorageError("no such table: subscription_tokens")
        return self.tokens.get(token)

    def confirm_subscriber(self, subscriber_id: UUID) -> None:
        if self.fail_on == "confirm_subscriber":
            raise StorageError("database is locked")
        self.statuses[subscriber_id] = SubscriberStatus.CONFIRMED


@pytest.fixture
def repo() -> MockConfirmationRepo:
    return MockConfirmationRepo()


def test_confirms_pending_subscriber(repo) -> None:
    subscriber_id = repo.add_pending("tok")

    result = run_confirm(ConfirmInput(token="tok"), repo)

    assert result.success is True
    assert result.subscriber_id == subscriber_id
    assert repo.statuses[subscriber_id] == SubscriberStatus.CONFIRMED


def test_confirming_twice_succeeds(repo) -> None:
    subscriber_id = repo.add_pending("tok")

    first = run_confirm(ConfirmInput(token="tok"), repo)
    second = run_confirm(ConfirmInput(token="tok"), repo)

    assert first.success and second.success
    assert repo.statuses[subscriber_id] == SubscriberStatus.CONFIRMED


def test_unknown_token(repo) -> None:
    result = run_confirm(ConfirmInput(token="never-issued"), repo)

    assert result.success is False
    assert result.subscriber_id is None
    assert [e.code for e in result.errors] == ["INVALID_TOKEN"]


@pytest.mark.parametrize("step", ["get_subscriber_id_from_token", "confirm_subscriber"])
def test_storage_failure(repo, step) -> None:
    repo.add_pending("tok")
    repo.fail_on = step

    with pytest.raises(UnexpectedError) as exc_info:
        run_confirm(ConfirmInput(token="tok"), repo)

    assert exc_info.value.step == step
    assert isinstance(exc_info.value.__cause__, StorageError)


def test_input_repr_hides_token() -> None:
    assert "secret-token" not in repr(ConfirmInput(token="secret-token"))


def test_run_rejects_unknown_input(repo) -> None:
    with pytest.raises(ValueError, match="Unknown input type"):
        run("tok", repo=repo)  # type: ignore[arg-type]
