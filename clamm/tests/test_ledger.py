"""
In-memory ledger tests
"""

import pytest

from ..core.ledger import InMemoryLedger, Ledger
from ..exceptions import InsufficientBalance, TransferError


@pytest.fixture
def ledger():
    ledger = InMemoryLedger()
    ledger.mint("alice", "TKA", 1000)
    return ledger


class TestInMemoryLedger:

    def test_is_ledger(self, ledger):
        assert isinstance(ledger, Ledger)

    def test_unknown_account_has_zero(self, ledger):
        assert ledger.balance_of("nobody", "TKA") == 0
        assert ledger.balance_of("alice", "TKB") == 0

    def test_transfer(self, ledger):
        ledger.transfer_token("alice", "bob", "TKA", 400)
        assert ledger.balance_of("alice", "TKA") == 600
        assert ledger.balance_of("bob", "TKA") == 400

    def test_zero_transfer(self, ledger):
        ledger.transfer_token("bob", "alice", "TKA", 0)
        assert ledger.balance_of("alice", "TKA") == 1000

    def test_insufficient_balance_moves_nothing(self, ledger):
        with pytest.raises(InsufficientBalance):
            ledger.transfer_token("alice", "bob", "TKA", 1001)
        assert ledger.balance_of("alice", "TKA") == 1000
        assert ledger.balance_of("bob", "TKA") == 0

    def test_insufficient_balance_is_transfer_error(self, ledger):
        with pytest.raises(TransferError):
            ledger.transfer_token("bob", "alice", "TKA", 1)

    def test_negative_amount(self, ledger):
        with pytest.raises(TransferError):
            ledger.transfer_token("alice", "bob", "TKA", -1)
        with pytest.raises(TransferError):
            ledger.mint("alice", "TKA", -1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
