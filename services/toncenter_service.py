"""TON Center Ledger API Service - transactions of the watched deposit address"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp

from config import Config
from utils.data_sanitizer import mask_api_key_safe, safe_error_log

logger = logging.getLogger(__name__)


class TonCenterAPIError(Exception):
    """Base exception for TON Center API errors"""

    pass


class FetchError(TonCenterAPIError):
    """Network failure, timeout or non-success HTTP response"""

    pass


class DecodeError(TonCenterAPIError):
    """Response body is not JSON or does not match the transactions schema"""

    pass


@dataclass(frozen=True)
class RawTransaction:
    """One feed entry as received; fields are left unparsed for the classifier"""

    lt: str
    value: str
    comment: Optional[str]


def _require_mapping(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"Expected object at {where}, got {type(value).__name__}")
    return value


def _as_text(value: Any) -> str:
    # The API sends numbers as decimal strings; tolerate bare ints too
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (str, int)):
        return str(value)
    return repr(value)


def decode_transactions(payload: Any) -> List[RawTransaction]:
    """
    Decode a getTransactions response document into RawTransaction values.

    Expected shape:
        {"ok": true, "result": [{"transaction_id": {"lt": "..."},
                                 "in_msg": {"value": "...", "message": "..."}}]}

    Raises:
        FetchError: the API answered with ok=false
        DecodeError: the document does not match the schema
    """
    document = _require_mapping(payload, "response")

    if document.get("ok") is False:
        raise FetchError(f"TON Center API error: {document.get('error', 'unknown error')}")

    if "result" not in document:
        raise DecodeError("Response has no 'result' field")
    result = document["result"]
    if not isinstance(result, list):
        raise DecodeError(f"Expected list at result, got {type(result).__name__}")

    transactions = []
    for index, entry in enumerate(result):
        # A malformed entry is dropped on its own, the rest of the batch stands
        if not isinstance(entry, dict):
            logger.debug(f"Skipping result[{index}]: expected object, got {type(entry).__name__}")
            continue

        transaction_id = entry.get("transaction_id")
        if not isinstance(transaction_id, dict):
            logger.debug(f"result[{index}] has no transaction_id object - lt left empty")
            transaction_id = {}

        # Outgoing-only transactions carry no inbound message
        in_msg = entry.get("in_msg")
        if not isinstance(in_msg, dict):
            if in_msg is not None:
                logger.debug(f"result[{index}].in_msg is {type(in_msg).__name__} - treated as empty")
            in_msg = {}

        message = in_msg.get("message")
        transactions.append(
            RawTransaction(
                lt=_as_text(transaction_id.get("lt")),
                value=_as_text(in_msg.get("value")),
                comment=message if isinstance(message, str) else None,
            )
        )

    return transactions


class TonCenterService:
    """Service for reading the deposit address history from TON Center"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or Config.TONCENTER_BASE_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or Config.TONCENTER_TIMEOUT_SECONDS)

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for TON Center API requests"""
        return {
            "Accept": "application/json",
            "User-Agent": "TON-Deposit-Bot/1.0",
        }

    def _get_params(self, address: str, limit: int, api_key: Optional[str]) -> Dict[str, str]:
        params = {
            "address": address,
            "limit": str(limit),
            "archival": "true",
        }
        if api_key:
            params["api_key"] = api_key
        return params

    async def fetch_transactions(
        self, address: str, limit: int, api_key: Optional[str] = None
    ) -> List[RawTransaction]:
        """
        Fetch the most recent transactions of an address.

        The result is in whatever order the API returns; callers must not
        assume it is sorted by lt.

        Raises:
            FetchError: network, timeout or HTTP failure
            DecodeError: malformed JSON or unexpected document shape
        """
        url = f"{self.base_url}/getTransactions"
        logger.debug(
            f"TON Center request: address={address} limit={limit} key={mask_api_key_safe(api_key)}"
        )

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(
                    url,
                    params=self._get_params(address, limit, api_key),
                    headers=self._get_headers(),
                ) as response:
                    if response.status != 200:
                        body = await response.text()
                        raise FetchError(
                            f"TON Center API error: HTTP {response.status}: {body[:200]}"
                        )
                    try:
                        # Some gateways answer with text/html or a missing content type
                        payload = await response.json(content_type=None)
                    except (aiohttp.ContentTypeError, ValueError) as e:
                        raise DecodeError(f"Invalid JSON from TON Center: {e}") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Network error connecting to TON Center: {safe_error_log(e)}") from e
        except asyncio.TimeoutError as e:
            raise FetchError("TON Center request timed out") from e

        transactions = decode_transactions(payload)
        logger.debug(f"TON Center returned {len(transactions)} transactions")
        return transactions
