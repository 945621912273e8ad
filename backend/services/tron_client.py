"""
TronContractClient - read-only access to the notice contract via TronGrid.

Uses the full node's /wallet/triggerconstantcontract endpoint, which executes
a view function without creating a transaction. Results come back as ABI
encoded hex and are decoded with eth_abi (TRON contracts share the EVM ABI).

Usage:
    client = TronContractClient(http_client, contract_address="TLhY...")
    record = await client.get_alert_notice(5)
    # Returns: AlertRecord or None when the id has never been minted
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from eth_abi import decode, encode

from services.errors import ContractCallError
from utils.address import is_zero_address, to_base58

logger = logging.getLogger(__name__)

# alertNotices(uint256) public getter
ALERT_NOTICE_SELECTOR = "alertNotices(uint256)"
ALERT_NOTICE_OUTPUTS = [
    'address',  # recipient
    'address',  # sender (process server)
    'uint256',  # documentId
    'uint256',  # timestamp (seconds)
    'bool',     # acknowledged
    'string',   # issuingAgency
    'string',   # noticeType
    'string',   # caseNumber
    'string',   # caseDetails
    'string',   # legalRights
    'uint256',  # responseDeadline
    'string',   # previewImage
]


@dataclass
class AlertRecord:
    """Decoded alertNotices tuple. Addresses are chain-native hex."""
    notice_id: int
    recipient: str
    sender: str
    document_id: int
    timestamp: int
    acknowledged: bool
    issuing_agency: str = ""
    notice_type: str = ""
    case_number: str = ""
    case_details: str = ""
    legal_rights: str = ""
    response_deadline: int = 0
    preview_image: str = ""

    @classmethod
    def from_abi(cls, notice_id: int, values) -> 'AlertRecord':
        return cls(notice_id, *values)


class TronContractClient:
    """
    Constant-call client for the legal notice contract.

    A call either returns a decoded record, returns None (empty mapping slot),
    raises ContractCallError (node rejected the call) or lets httpx errors
    propagate (transport failure).
    """

    TRIGGER_PATH = "/wallet/triggerconstantcontract"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        contract_address: str,
        owner_address: Optional[str] = None
    ):
        self.http = http_client
        self.contract_address = to_base58(contract_address) if contract_address else ""
        # Constant calls need some caller; the contract itself is fine
        self.owner_address = to_base58(owner_address) if owner_address else self.contract_address
        if not self.contract_address:
            logger.warning("No notice contract address configured; chain reads will fail")

    async def call_constant(self, function_selector: str, parameter: str) -> bytes:
        """Execute a view function and return the raw ABI result."""
        if not self.contract_address:
            raise ContractCallError(function_selector, "no contract address configured")
        payload = {
            'owner_address': self.owner_address,
            'contract_address': self.contract_address,
            'function_selector': function_selector,
            'parameter': parameter,
            'visible': True,
        }
        response = await self.http.post(self.TRIGGER_PATH, json=payload)
        response.raise_for_status()
        data = response.json()

        result = data.get('result') or {}
        if not result.get('result'):
            message = result.get('message') or result.get('code') or 'call rejected'
            raise ContractCallError(function_selector, _decode_node_message(message))

        outputs = data.get('constant_result') or []
        if not outputs or not outputs[0]:
            raise ContractCallError(function_selector, "empty constant_result")

        transaction = data.get('transaction') or {}
        ret = (transaction.get('ret') or [{}])[0]
        if ret.get('ret') == 'FAILED':
            raise ContractCallError(function_selector, "execution reverted")

        return bytes.fromhex(outputs[0])

    async def get_alert_notice(self, notice_id: int) -> Optional[AlertRecord]:
        parameter = encode(['uint256'], [int(notice_id)]).hex()
        raw = await self.call_constant(ALERT_NOTICE_SELECTOR, parameter)
        try:
            values = decode(ALERT_NOTICE_OUTPUTS, raw)
        except Exception as e:
            raise ContractCallError(ALERT_NOTICE_SELECTOR, f"undecodable result: {e}")

        record = AlertRecord.from_abi(int(notice_id), values)
        if is_zero_address(record.sender):
            logger.debug(f"Alert {notice_id} not minted")
            return None
        return record


def _decode_node_message(message) -> str:
    """TronGrid hex-encodes error messages."""
    if isinstance(message, str):
        try:
            return bytes.fromhex(message).decode('utf-8', errors='replace')
        except ValueError:
            return message
    return str(message)


def record_addresses(record: AlertRecord) -> tuple:
    """(recipient, sender) as base58 T-addresses."""
    return to_base58(record.recipient), to_base58(record.sender)
