import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from stakesim.analysis.projection import Cadence, ProjectionConfig
from stakesim.analysis.regimes import CredentialType
from stakesim.exceptions import InvalidInput, UpstreamUnavailable

logger = logging.getLogger(__name__)

GWEI_PER_ETH = 1_000_000_000

HEX_RE = re.compile(r"^[0-9a-fA-F]+$")

# First byte of the withdrawal credentials -> regime
CREDENTIAL_PREFIXES = {
    "0x00": CredentialType.CAPPED,  # BLS credentials, no compounding
    "0x01": CredentialType.COMPOUNDING,  # execution address, eligible for EIP-7251
    "0x02": CredentialType.COMPOUNDING,  # compounding credentials
}


def determine_credential_type(withdrawal_credentials: str | None) -> CredentialType:
    """Infer the regime from the first four characters of the credentials hex."""
    if not withdrawal_credentials:
        logger.warning("Missing withdrawal credentials, assuming capped")
        return CredentialType.CAPPED

    prefix = withdrawal_credentials[:4].lower()
    credential_type = CREDENTIAL_PREFIXES.get(prefix)
    if credential_type is None:
        logger.warning("Unknown credential prefix: %s, assuming capped", prefix)
        return CredentialType.CAPPED
    return credential_type


def classify_identifier(validator_id: str) -> tuple[str, str]:
    """Return (kind, path) for a validator index, public key or execution address."""
    validator_id = validator_id.strip() if validator_id else ""
    if not validator_id:
        raise InvalidInput("validator identifier is required")

    if validator_id.startswith("0x") and len(validator_id) == 42 and HEX_RE.match(validator_id[2:]):
        return "address", f"/validator/eth1/{validator_id}"

    pubkey = validator_id[2:] if validator_id.startswith("0x") else validator_id
    if len(pubkey) == 96 and HEX_RE.match(pubkey):
        return "pubkey", f"/validator/{pubkey}"

    if validator_id.isdigit():
        return "index", f"/validator/{validator_id}"

    raise InvalidInput(
        f"{validator_id!r} is not a validator index, public key or execution address"
    )


def _parse_gwei(name: str, value: Any) -> float:
    """Balances come back as numbers or numeric strings depending on endpoint."""
    if isinstance(value, bool) or value is None:
        raise UpstreamUnavailable(f"Validator payload has no usable {name}")
    if isinstance(value, (int, float)):
        gwei = float(value)
    elif isinstance(value, str):
        try:
            gwei = float(value)
        except ValueError:
            raise UpstreamUnavailable(f"Validator {name} is not numeric: {value!r}") from None
    else:
        raise UpstreamUnavailable(f"Unexpected {name} type: {type(value).__name__}")

    if not math.isfinite(gwei) or gwei < 0:
        raise UpstreamUnavailable(f"Validator {name} out of range: {value!r}")
    return gwei


@dataclass(frozen=True)
class ValidatorRecord:
    """Subset of a beacon-chain validator record used for projections."""

    balance_gwei: float
    effective_balance_gwei: float
    status: str
    withdrawal_credentials: str | None
    validator_index: int | None = None
    pubkey: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ValidatorRecord":
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(f"Malformed validator payload: {type(payload).__name__}")

        try:
            index = int(payload.get("validatorindex"))
        except (TypeError, ValueError):
            index = None

        return cls(
            balance_gwei=_parse_gwei("balance", payload.get("balance")),
            effective_balance_gwei=_parse_gwei(
                "effective balance", payload.get("effectivebalance")
            ),
            status=str(payload.get("status") or "unknown"),
            withdrawal_credentials=payload.get("withdrawalcredentials"),
            validator_index=index,
            pubkey=payload.get("pubkey"),
        )

    @property
    def balance_eth(self) -> float:
        return self.balance_gwei / GWEI_PER_ETH

    @property
    def effective_balance_eth(self) -> float:
        return self.effective_balance_gwei / GWEI_PER_ETH

    @property
    def credential_prefix(self) -> str:
        return self.withdrawal_credentials[:4] if self.withdrawal_credentials else "unknown"

    @property
    def credential_type(self) -> CredentialType:
        return determine_credential_type(self.withdrawal_credentials)

    def to_config(
        self,
        annual_reward_rate: float,
        time_period_years: int,
        cadence: Cadence | str = Cadence.EPOCH,
    ) -> ProjectionConfig:
        """Seed a projection from the current on-chain balance and credentials."""
        return ProjectionConfig(
            initial_balance=self.balance_eth,
            credential_type=self.credential_type,
            annual_reward_rate=annual_reward_rate,
            time_period_years=time_period_years,
            cadence=cadence,
        )


class _RetryableStatus(Exception):
    def __init__(self, status_code: int):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class BeaconClient:
    """Rate-limited, retry-enabled wrapper around the beaconcha.in validator API."""

    def __init__(
        self,
        base_url: str = "https://beaconcha.in/api/v1",
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff: float = 2.0,
        delay: float = 0.0,
        api_key: str = "",
        transport: httpx.BaseTransport | None = None,
    ):
        self._max_retries = max_retries
        self._backoff = backoff
        self._delay = delay
        self._api_key = api_key
        self._last_request_time: float = 0.0
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings, transport: httpx.BaseTransport | None = None) -> "BeaconClient":
        return cls(
            base_url=settings.beacon_api_url,
            timeout=settings.beacon_timeout,
            max_retries=settings.beacon_max_retries,
            backoff=settings.beacon_retry_backoff,
            delay=settings.beacon_request_delay,
            api_key=settings.beacon_api_key,
            transport=transport,
        )

    def __enter__(self) -> "BeaconClient":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self._client.close()

    def _rate_limit(self):
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self._delay:
            time.sleep(self._delay - elapsed)
        self._last_request_time = time.monotonic()

    def _get(self, path: str) -> Any:
        params = {"apikey": self._api_key} if self._api_key else None

        @retry(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._backoff, max=30),
            retry=retry_if_exception_type((httpx.TransportError, _RetryableStatus)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> httpx.Response:
            self._rate_limit()
            response = self._client.get(path, params=params)
            if response.status_code == 429 or response.status_code >= 500:
                raise _RetryableStatus(response.status_code)
            return response

        try:
            response = _inner()
        except httpx.TimeoutException as e:
            raise UpstreamUnavailable(f"Beacon API timed out: {path}") from e
        except httpx.TransportError as e:
            raise UpstreamUnavailable(f"Beacon API unreachable: {e}") from e
        except _RetryableStatus as e:
            raise UpstreamUnavailable(
                f"Beacon API failed with status {e.status_code}", status_code=e.status_code
            ) from e

        if not response.is_success:
            raise UpstreamUnavailable(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamUnavailable("Beacon API returned a non-JSON body") from e

        if not isinstance(body, dict) or body.get("status") == "error" or not body.get("data"):
            message = body.get("message") if isinstance(body, dict) else None
            raise UpstreamUnavailable(message or "Failed to fetch validator data")
        return body["data"]

    def fetch_validator(self, validator_id: str) -> ValidatorRecord:
        """Look up a validator by index, public key or execution (withdrawal) address."""
        kind, path = classify_identifier(validator_id)
        logger.info("Fetching validator data from: %s", path)

        data = self._get(path)
        if isinstance(data, list):
            if len(data) > 1:
                logger.info("API returned %d validators, using the first one", len(data))
            data = data[0]

        # eth1 lookups only list the validators behind an address; resolve the first by index
        if kind == "address" and isinstance(data, dict) and "balance" not in data:
            index = data.get("validatorindex")
            if index is None:
                raise UpstreamUnavailable(f"No validator index for address {validator_id}")
            data = self._get(f"/validator/{index}")
            if isinstance(data, list):
                data = data[0]

        record = ValidatorRecord.from_payload(data)
        logger.debug(
            "Processed validator %s: balance=%.6f effective=%.2f prefix=%s",
            record.validator_index, record.balance_eth, record.effective_balance_eth,
            record.credential_prefix,
        )
        return record
