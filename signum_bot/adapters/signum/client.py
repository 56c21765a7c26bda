from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from signum_bot.adapters.signum.models import (
    DEFAULT_DEADLINE,
    Account,
    MiningInfo,
    RequestType,
    TransactionRequest,
    TransactionResponse,
)
from signum_bot.core.errors import ConfigurationError, SignumApiError, TransactionError, UpstreamError
from signum_bot.core.fmt import fmt_nqt
from signum_bot.core.http import ResilientHTTPClient

logger = logging.getLogger(__name__)

API_PATH = "/burst"
ACCOUNT_RS_RE = re.compile(r"^(S|BURST)-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{5}$", re.IGNORECASE)
ACCOUNT_ID_RE = re.compile(r"^\d{1,20}$")


def looks_like_account(text: str) -> bool:
    raw = (text or "").strip()
    return bool(ACCOUNT_RS_RE.match(raw) or ACCOUNT_ID_RE.match(raw))


def _flag(value: bool) -> str:
    return "true" if value else "false"


def build_transaction_params(req: TransactionRequest) -> dict[str, str]:
    params = {
        "requestType": req.request_type.value,
        "secretPhrase": req.secret_phrase,
        "feeNQT": fmt_nqt(req.fee_nqt),
    }
    if req.recipient:
        params["recipient"] = req.recipient
    if req.recipients:
        params["recipients"] = req.recipients
    if req.amount_nqt != 0:
        params["amountNQT"] = fmt_nqt(req.amount_nqt)
    if req.message:
        params["message"] = req.message
        params["messageIsText"] = _flag(req.message_is_text)
    if req.message_to_encrypt:
        params["messageToEncrypt"] = req.message_to_encrypt
        params["messageToEncryptIsText"] = _flag(req.message_to_encrypt_is_text)
    if req.name:
        params["name"] = req.name
    if req.description:
        params["description"] = req.description
    params["deadline"] = str(req.deadline or DEFAULT_DEADLINE)
    if not req.broadcast:
        params["broadcast"] = "false"
    return params


class SignumApiClient:
    def __init__(self, http: ResilientHTTPClient) -> None:
        self.http = http

    async def create_transaction(self, req: TransactionRequest) -> TransactionResponse:
        if not req.secret_phrase:
            raise ConfigurationError("TransactionRequest.secret_phrase is not set")

        params = build_transaction_params(req)
        try:
            data = await self.http.post_json(API_PATH, params=params)
            resp = TransactionResponse.model_validate(data)
        except (UpstreamError, ValidationError) as exc:
            raise TransactionError(exc) from exc

        if resp.error_code_text:
            raise TransactionError(resp.error_code_text)
        if resp.error_description:
            raise TransactionError(resp.error_description)

        logger.info(
            "transaction_created",
            extra={"event": "transaction_created", "request_type": req.request_type.value, "account": req.recipient},
        )
        return resp

    async def send_money(
        self,
        secret_phrase: str,
        recipient: str,
        amount_nqt: float,
        fee_nqt: float,
        message: str = "",
    ) -> TransactionResponse:
        return await self.create_transaction(
            TransactionRequest(
                request_type=RequestType.SEND_MONEY,
                secret_phrase=secret_phrase,
                recipient=recipient,
                amount_nqt=amount_nqt,
                fee_nqt=fee_nqt,
                message=message,
            )
        )

    async def send_message(self, secret_phrase: str, recipient: str, message: str, fee_nqt: float) -> TransactionResponse:
        return await self.create_transaction(
            TransactionRequest(
                request_type=RequestType.SEND_MESSAGE,
                secret_phrase=secret_phrase,
                recipient=recipient,
                message=message,
                fee_nqt=fee_nqt,
            )
        )

    async def get_account(self, account: str) -> Account:
        data = await self.http.get_json(
            API_PATH,
            params={"requestType": RequestType.GET_ACCOUNT.value, "account": account.strip().upper()},
        )
        acc = Account.model_validate(data)
        if acc.error_code or acc.error_description:
            raise SignumApiError(acc.error_description or f"error code {acc.error_code}")
        return acc

    async def get_mining_info(self) -> MiningInfo:
        data = await self.http.get_json(API_PATH, params={"requestType": RequestType.GET_MINING_INFO.value})
        return MiningInfo.model_validate(data)
