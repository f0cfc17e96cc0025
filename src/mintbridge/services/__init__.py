"""Bridge and withdrawal flows plus their event streaming."""

from mintbridge.services.balances import (
    AssetBalance,
    BalanceQuery,
    BalanceSnapshot,
    get_onchain_balances,
    read_balance_snapshot,
)
from mintbridge.services.bridge import (
    BridgeAttempt,
    BridgeRequest,
    BridgeService,
    BridgeState,
    InvalidTransitionError,
)
from mintbridge.services.stream import run_operation_stream
from mintbridge.services.withdrawal import (
    WithdrawalOutcome,
    WithdrawalSequencer,
    WithdrawalStatus,
    run_withdrawal,
    validate_destination,
)

__all__ = [
    "AssetBalance",
    "BalanceQuery",
    "BalanceSnapshot",
    "BridgeAttempt",
    "BridgeRequest",
    "BridgeService",
    "BridgeState",
    "InvalidTransitionError",
    "WithdrawalOutcome",
    "WithdrawalSequencer",
    "WithdrawalStatus",
    "get_onchain_balances",
    "read_balance_snapshot",
    "run_operation_stream",
    "run_withdrawal",
    "validate_destination",
]
