"""
Unit tests for the aggregate root event-sourcing core.
"""

import pytest

from ddd_kernel.domain.exceptions import EventPublishError, UnhandledEventError
from ddd_kernel.domain.models.validation import validate

from bank_account import AccountOpened, BankAccount, MoneyDeposited, MoneyWithdrawn
from doubles import RecordingEventBus


class TestApplyChange:
    """Test recording new events."""

    def test_open_records_creation_event(self, account_id):
        account = BankAccount.open(account_id, "ada")

        events = account.pull_domain_events()

        assert [type(e) for e in events] == [AccountOpened]
        assert account.props == {'owner': "ada", 'balance': 0}
        assert account.version == 0

    def test_apply_change_then_pull_returns_event_once(self, account):
        event = MoneyDeposited({'aggregate_id': account.id, 'amount': 5})

        account.apply_change(event)

        assert account.pull_domain_events() == [event]
        assert account.pull_domain_events() == []

    def test_state_transitions_are_applied(self, account):
        account.deposit(100)
        account.withdraw(30)

        assert account.balance == 70
        assert [type(e) for e in account.domain_events] == [MoneyDeposited, MoneyWithdrawn]

    def test_ledger_keeps_insertion_order_and_duplicates(self, account):
        event = MoneyDeposited({'aggregate_id': account.id, 'amount': 5})

        account.apply_change(event)
        account.apply_change(event)

        assert account.pull_domain_events() == [event, event]
        assert account.balance == 10

    def test_unknown_event_kind_raises_and_is_not_recorded(self, account):
        with pytest.raises(UnhandledEventError) as exc_info:
            account.close()

        assert exc_info.value.event_kind == "AccountClosed"
        assert account.pull_domain_events() == []

    def test_pull_returns_copy(self, account):
        account.deposit(1)

        pulled = account.pull_domain_events()
        pulled.append("junk")

        assert account.pull_domain_events() == []

    def test_domain_events_view_does_not_clear(self, account):
        account.deposit(1)

        assert len(account.domain_events) == 1
        assert len(account.domain_events) == 1

    def test_aggregate_is_a_valid_entity(self, account):
        view = validate(account).unwrap()
        assert view.to_object()['balance'] == 0


class TestLoadsFromHistory:
    """Test replaying persisted events."""

    def test_replay_applies_state_without_recording(self, account_id):
        opened = AccountOpened({'aggregate_id': account_id, 'owner': "ada"})
        history = [
            opened,
            MoneyDeposited({'aggregate_id': account_id, 'amount': 50}),
            MoneyWithdrawn({'aggregate_id': account_id, 'amount': 20}),
        ]
        account = BankAccount.build_from_creation_event(opened)

        account.loads_from_history(history, AccountOpened)

        assert account.balance == 30
        assert account.pull_domain_events() == []

    def test_replay_skips_creation_event(self, account_id):
        account = BankAccount.build_from_creation_event(
            AccountOpened({'aggregate_id': account_id, 'owner': "ada"})
        )
        account.deposit(10)
        account.clear_events()

        # A second creation event would reset the balance if it were applied
        account.loads_from_history(
            [AccountOpened({'aggregate_id': account_id, 'owner': "ada"})], AccountOpened
        )

        assert account.balance == 10

    def test_replay_keeps_existing_ledger(self, account, account_id):
        account.deposit(1)

        account.loads_from_history([MoneyDeposited({'aggregate_id': account_id, 'amount': 2})], AccountOpened)

        assert len(account.pull_domain_events()) == 1
        assert account.balance == 3


class TestCommitAndClear:
    """Test commit and clear without dispatch."""

    def test_commit_events_marks_without_clearing(self, account):
        account.deposit(1)
        account.deposit(2)

        account.commit_events()

        events = account.pull_domain_events()
        assert len(events) == 2
        assert all(e.is_committed() for e in events)

    def test_clear_events_drops_ledger(self, account):
        account.deposit(1)

        account.clear_events()

        assert account.pull_domain_events() == []
        assert account.balance == 1


class TestPublishEvents:
    """Test committing and dispatching the ledger."""

    @pytest.mark.asyncio
    async def test_publish_commits_dispatches_and_clears(self, account, event_bus, mock_logger):
        account.deposit(10)
        account.withdraw(5)
        pending = list(account.domain_events)

        await account.publish_events(mock_logger, event_bus)

        assert sorted(e.id for e in event_bus.dispatched) == sorted(e.id for e in pending)
        assert all(e.is_committed() for e in event_bus.dispatched)
        assert all(event_bus.committed_at_dispatch)
        assert account.pull_domain_events() == []

    @pytest.mark.asyncio
    async def test_publish_logs_each_event(self, account, event_bus, mock_logger):
        account.deposit(10)
        account.deposit(20)

        await account.publish_events(mock_logger, event_bus)

        assert mock_logger.debug.call_count == 2
        message = mock_logger.debug.call_args_list[0].args[0]
        assert '"MoneyDeposited" event published for aggregate BankAccount' in message
        assert mock_logger.debug.call_args_list[0].kwargs['aggregate_id'] == str(account.id)

    @pytest.mark.asyncio
    async def test_publish_passes_correlation_id(self, account, event_bus, mock_logger):
        account.apply_change(MoneyDeposited({
            'aggregate_id': account.id, 'amount': 1, 'metadata': {'correlation_id': "corr-9"}
        }))

        await account.publish_events(mock_logger, event_bus)

        assert mock_logger.debug.call_args.kwargs['correlation_id'] == "corr-9"

    @pytest.mark.asyncio
    async def test_publish_empty_ledger_is_noop(self, account, event_bus, mock_logger):
        await account.publish_events(mock_logger, event_bus)

        assert event_bus.dispatched == []
        mock_logger.debug.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_dispatch_does_not_stop_others(self, account, mock_logger):
        bus = RecordingEventBus(fail_for=[MoneyWithdrawn.kind])
        account.deposit(10)
        account.withdraw(5)
        account.deposit(1)

        with pytest.raises(EventPublishError) as exc_info:
            await account.publish_events(mock_logger, bus)

        assert len(bus.dispatched) == 3
        assert [type(event) for event, _ in exc_info.value.failures] == [MoneyWithdrawn]
        assert isinstance(exc_info.value.failures[0][1], RuntimeError)
        assert all(e.is_committed() for e in bus.dispatched)
        assert account.pull_domain_events() == []
