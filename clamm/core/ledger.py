"""
Token ledger - the value-transfer collaborator

The pool only moves balances through this interface. A transfer that cannot
be honored raises and moves nothing, which lets the pool roll back the whole
call.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict

from ..exceptions import InsufficientBalance, TransferError

logger = logging.getLogger(__name__)


class Ledger(ABC):
    """Balance keeper for the pool's two tokens"""

    @abstractmethod
    def transfer_token(self, sender: str, recipient: str, token: str, amount: int) -> None:
        """Move amount of token from sender to recipient or raise TransferError"""

    @abstractmethod
    def balance_of(self, account: str, token: str) -> int:
        """Current balance of an account"""


class InMemoryLedger(Ledger):
    """Ledger backed by per-token balance maps

    Usage:
        ledger = InMemoryLedger()
        ledger.mint("alice", "DAI", 10**18)
        ledger.transfer_token("alice", "bob", "DAI", 10**17)
    """

    def __init__(self):
        self.balances: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))

    def mint(self, account: str, token: str, amount: int) -> None:
        """Credit an account out of thin air (funding for tests and scripts)"""
        if amount < 0:
            raise TransferError(f"cannot mint negative amount {amount}")
        self.balances[token][account] += amount

    def balance_of(self, account: str, token: str) -> int:
        return self.balances[token][account]

    def transfer_token(self, sender: str, recipient: str, token: str, amount: int) -> None:
        if amount < 0:
            raise TransferError(f"cannot transfer negative amount {amount}")

        available = self.balances[token][sender]
        if available < amount:
            raise InsufficientBalance(
                f"{sender} holds {available} {token}, needs {amount}"
            )

        self.balances[token][sender] = available - amount
        self.balances[token][recipient] += amount
        logger.debug(
            "Token transferred",
            extra={
                "event": "ledger.transfer",
                "token": token,
                "sender": sender,
                "recipient": recipient,
                "amount": amount,
            }
        )
