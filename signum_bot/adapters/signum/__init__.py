from signum_bot.adapters.signum.client import SignumApiClient, build_transaction_params, looks_like_account
from signum_bot.adapters.signum.models import (
    DEFAULT_DEADLINE,
    Account,
    MiningInfo,
    RequestType,
    Transaction,
    TransactionRequest,
    TransactionResponse,
)

__all__ = [
    "DEFAULT_DEADLINE",
    "Account",
    "MiningInfo",
    "RequestType",
    "SignumApiClient",
    "Transaction",
    "TransactionRequest",
    "TransactionResponse",
    "build_transaction_params",
    "looks_like_account",
]
