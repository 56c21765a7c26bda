from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DEADLINE = 1440  # minutes, also the node's maximum


class RequestType(str, Enum):
    SEND_MONEY = "sendMoney"
    SEND_MONEY_MULTI = "sendMoneyMulti"
    SEND_MONEY_MULTI_SAME = "sendMoneyMultiSame"
    SEND_MESSAGE = "sendMessage"
    SET_ACCOUNT_INFO = "setAccountInfo"
    SET_REWARD_RECIPIENT = "setRewardRecipient"
    ADD_COMMITMENT = "addCommitment"
    REMOVE_COMMITMENT = "removeCommitment"
    ISSUE_ASSET = "issueAsset"

    GET_ACCOUNT = "getAccount"
    GET_MINING_INFO = "getMiningInfo"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_error_code(value: Any) -> str:
    # nodes may report success as errorCode 0
    if value is None or value == 0 or value == "0":
        return ""
    return str(value)


class _NodeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Attachment(_NodeModel):
    recipients: list[Any] = Field(default_factory=list)
    amount_nqt: float = Field(default=0.0, alias="amountNQT")
    message: str = ""
    message_is_text: bool = Field(default=False, alias="messageIsText")
    # shape depends on the encryption scheme; kept as-is
    encrypted_message: Any = Field(default=None, alias="encryptedMessage")


class Transaction(_NodeModel):
    transaction_id: str = Field(default="", alias="transaction")
    type: int = 0
    subtype: int = 0
    timestamp: int = 0
    recipient: str = ""
    recipient_rs: str = Field(default="", alias="recipientRS")
    amount_nqt: float = Field(default=0.0, alias="amountNQT")
    fee_nqt: float = Field(default=0.0, alias="feeNQT")
    sender: str = ""
    sender_rs: str = Field(default="", alias="senderRS")
    height: int = 0
    attachment: Attachment = Field(default_factory=Attachment)


@dataclass
class TransactionRequest:
    request_type: RequestType
    secret_phrase: str = ""
    fee_nqt: float = 0.0
    recipient: str = ""
    recipients: str = ""
    amount_nqt: float = 0.0
    name: str = ""
    description: str = ""
    deadline: int = 0
    broadcast: bool = True
    message: str = ""
    message_is_text: bool = True
    message_to_encrypt: str = ""
    message_to_encrypt_is_text: bool = True

    def __repr__(self) -> str:
        return (
            f"TransactionRequest(request_type={self.request_type.value!r}, recipient={self.recipient!r}, "
            f"amount_nqt={self.amount_nqt}, fee_nqt={self.fee_nqt}, secret_phrase='***')"
        )


class TransactionResponse(_NodeModel):
    signature_hash: str = Field(default="", alias="signatureHash")
    unsigned_transaction_bytes: str = Field(default="", alias="unsignedTransactionBytes")
    transaction_json: Transaction = Field(default_factory=Transaction, alias="transactionJSON")
    broadcasted: bool = False
    request_processing_time: int = Field(default=0, alias="requestProcessingTime")
    transaction_bytes: str = Field(default="", alias="transactionBytes")
    full_hash: str = Field(default="", alias="fullHash")
    transaction: str = ""
    error: str = ""
    error_code: str = Field(default="", alias="errorCode")
    error_description: str = Field(default="", alias="errorDescription")

    @field_validator("error", "error_description", "transaction", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("error_code", mode="before")
    @classmethod
    def coerce_error_code(cls, value: Any) -> str:
        return _as_error_code(value)

    @property
    def error_code_text(self) -> str:
        return self.error or self.error_code


class Account(_NodeModel):
    account: str = ""
    account_rs: str = Field(default="", alias="accountRS")
    name: str = ""
    description: str = ""
    public_key: str = Field(default="", alias="publicKey")
    balance_nqt: float = Field(default=0.0, alias="balanceNQT")
    unconfirmed_balance_nqt: float = Field(default=0.0, alias="unconfirmedBalanceNQT")
    committed_balance_nqt: float = Field(default=0.0, alias="committedBalanceNQT")
    error_code: str = Field(default="", alias="errorCode")
    error_description: str = Field(default="", alias="errorDescription")

    @field_validator("account", "error_description", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("error_code", mode="before")
    @classmethod
    def coerce_error_code(cls, value: Any) -> str:
        return _as_error_code(value)


class MiningInfo(_NodeModel):
    height: int = 0
    base_target: float = Field(default=0.0, alias="baseTarget")
    average_commitment_nqt: float = Field(default=0.0, alias="averageCommitmentNQT")
    last_block_reward: float = Field(default=0.0, alias="lastBlockReward")
