"""
Rekey-sweep app configuration

The config is loaded from a TOML file. All settings are optional and default to AlgoKit LocalNet:

[algod]
token = "aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
url = "http://localhost:4001"

[kmd]
token = "aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
url = "http://localhost:4002"
wallet = "unencrypted-default-wallet"
password = ""

[dispenser]
# when not specified, the funded account in the KMD wallet is used
mnemonic = "..."

[workflow]
funding_amount = 10_000_000
close_account = true

[confirmation]
max_rounds = 10
timeout_seconds = 60
wait_indefinitely = false
max_node_retries = 3
retry_backoff_seconds = 0.5
"""
import tomllib
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

from algosdk.error import WrongChecksumError, WrongMnemonicLengthError

from algorekey.algorand.client.accounts.dispenser import (
    DEFAULT_KMD_WALLET_NAME,
    DEFAULT_KMD_WALLET_PASSWORD,
)
from algorekey.algorand.client.model import Mnemonic, MicroAlgos

LOCALNET_TOKEN = "a" * 64
DEFAULT_FUNDING_AMOUNT = MicroAlgos(10_000_000)
DEFAULT_MAX_ROUNDS = 10


class ConfigError(Exception):
    """
    Invalid configuration
    """


@dataclass(slots=True, frozen=True)
class AlgodConfig:
    token: str = LOCALNET_TOKEN
    url: str = "http://localhost:4001"


@dataclass(slots=True, frozen=True)
class KmdConfig:
    token: str = LOCALNET_TOKEN
    url: str = "http://localhost:4002"
    wallet: str = DEFAULT_KMD_WALLET_NAME
    password: str = field(default=DEFAULT_KMD_WALLET_PASSWORD, repr=False)


@dataclass(slots=True, frozen=True)
class DispenserConfig:
    mnemonic: Mnemonic | None = field(default=None, repr=False)


@dataclass(slots=True, frozen=True)
class WorkflowConfig:
    # ALGO amount transferred to each new account
    funding_amount: MicroAlgos = DEFAULT_FUNDING_AMOUNT
    # sweep by closing account A, which transfers its entire balance including its min balance
    close_account: bool = True


@dataclass(slots=True, frozen=True)
class ConfirmationConfig:
    max_rounds: int | None = DEFAULT_MAX_ROUNDS
    timeout: timedelta | None = None
    wait_indefinitely: bool = False
    max_node_retries: int = 3
    retry_backoff: timedelta = timedelta(milliseconds=500)

    def waiter_kwargs(self) -> dict[str, Any]:
        """
        :return: ConfirmationWaiter constructor args
        """
        return {
            "max_rounds": self.max_rounds,
            "timeout": self.timeout,
            "wait_indefinitely": self.wait_indefinitely,
            "max_node_retries": self.max_node_retries,
            "retry_backoff": self.retry_backoff,
        }


@dataclass(slots=True, frozen=True)
class AppConfig:
    algod: AlgodConfig = field(default_factory=AlgodConfig)
    kmd: KmdConfig = field(default_factory=KmdConfig)
    dispenser: DispenserConfig = field(default_factory=DispenserConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    confirmation: ConfirmationConfig = field(default_factory=ConfirmationConfig)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "AppConfig":
        """
        :exception ConfigError: if the config is invalid
        """
        try:
            return cls(
                algod=AlgodConfig(**config.get("algod", {})),
                kmd=KmdConfig(**config.get("kmd", {})),
                dispenser=_dispenser_config(config.get("dispenser", {})),
                workflow=_workflow_config(config.get("workflow", {})),
                confirmation=_confirmation_config(config.get("confirmation", {})),
            )
        except (TypeError, ValueError) as err:
            raise ConfigError(str(err)) from err

    @classmethod
    def from_file(cls, file: Path) -> "AppConfig":
        """
        Loads the config from the specified TOML file
        """
        with open(file, "rb") as config_file:
            try:
                config = tomllib.load(config_file)
            except tomllib.TOMLDecodeError as err:
                raise ConfigError(f"invalid TOML config file: {file}: {err}") from err
        return cls.from_dict(config)

    def to_dict(self) -> dict[str, Any]:
        """
        Secrets are masked
        """
        return {
            "algod": {"url": self.algod.url},
            "kmd": {"url": self.kmd.url, "wallet": self.kmd.wallet},
            "dispenser": {
                "source": "kmd" if self.dispenser.mnemonic is None else "mnemonic"
            },
            "workflow": {
                "funding_amount": self.workflow.funding_amount,
                "close_account": self.workflow.close_account,
            },
            "confirmation": {
                "max_rounds": self.confirmation.max_rounds,
                "timeout_seconds": None
                if self.confirmation.timeout is None
                else self.confirmation.timeout.total_seconds(),
                "wait_indefinitely": self.confirmation.wait_indefinitely,
                "max_node_retries": self.confirmation.max_node_retries,
                "retry_backoff_seconds": self.confirmation.retry_backoff.total_seconds(),
            },
        }


def _dispenser_config(data: dict[str, Any]) -> DispenserConfig:
    word_list = _get(data, "dispenser", "mnemonic", str, None)
    if word_list is None:
        return DispenserConfig()
    mnemonic = Mnemonic.from_word_list(word_list)
    try:
        mnemonic.to_private_key()
    except (WrongChecksumError, WrongMnemonicLengthError) as err:
        raise ValueError(f"invalid dispenser.mnemonic: {err!r}") from err
    return DispenserConfig(mnemonic=mnemonic)


def _workflow_config(data: dict[str, Any]) -> WorkflowConfig:
    funding_amount = _get(data, "workflow", "funding_amount", int, DEFAULT_FUNDING_AMOUNT)
    if funding_amount <= 0:
        raise ValueError("workflow.funding_amount must be greater than 0")
    return WorkflowConfig(
        funding_amount=MicroAlgos(funding_amount),
        close_account=_get(data, "workflow", "close_account", bool, True),
    )


def _confirmation_config(data: dict[str, Any]) -> ConfirmationConfig:
    unknown_keys = set(data) - {
        "max_rounds",
        "timeout_seconds",
        "wait_indefinitely",
        "max_node_retries",
        "retry_backoff_seconds",
    }
    if unknown_keys:
        raise ValueError(f"unknown confirmation settings: {sorted(unknown_keys)}")

    wait_indefinitely = _get(data, "confirmation", "wait_indefinitely", bool, False)
    # TOML has no null: the default round bound is dropped when waiting indefinitely
    max_rounds = _get(
        data,
        "confirmation",
        "max_rounds",
        int,
        None if wait_indefinitely else DEFAULT_MAX_ROUNDS,
    )
    timeout_seconds = _get(data, "confirmation", "timeout_seconds", (int, float), None)
    if max_rounds is not None and max_rounds < 0:
        raise ValueError("confirmation.max_rounds must not be negative")
    if timeout_seconds is not None and timeout_seconds < 0:
        raise ValueError("confirmation.timeout_seconds must not be negative")

    return ConfirmationConfig(
        max_rounds=max_rounds,
        timeout=None if timeout_seconds is None else timedelta(seconds=timeout_seconds),
        wait_indefinitely=wait_indefinitely,
        max_node_retries=_get(data, "confirmation", "max_node_retries", int, 3),
        retry_backoff=timedelta(
            seconds=_get(data, "confirmation", "retry_backoff_seconds", (int, float), 0.5)
        ),
    )


def _get(
    data: dict[str, Any],
    section: str,
    key: str,
    types: type | tuple[type, ...],
    default: Any,
) -> Any:
    """
    :exception ValueError: if the value is not of the expected type
    """
    value = data.get(key, default)
    if value is None:
        return value
    expected = types if isinstance(types, tuple) else (types,)
    # bool is an int subclass, but `true` is never a valid number
    if isinstance(value, bool) and bool not in expected:
        valid = False
    else:
        valid = isinstance(value, expected)
    if not valid:
        names = " or ".join(t.__name__ for t in expected)
        raise ValueError(f"{section}.{key} must be a {names}: {value!r}")
    return value
