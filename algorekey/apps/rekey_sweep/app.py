"""
Rekey-sweep app

Runs the following workflow against an Algorand test network:

1. generate accounts A and B
2. fund both accounts from the dispenser account
3. rekey account A to account B, i.e., account B becomes account A's authorized signing account
4. sweep account A's ALGO balance into account B using a transaction signed by account B
"""
from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import Any
from urllib.error import URLError

from algosdk.error import AlgodHTTPError
from algosdk.kmd import KMDClient
from algosdk.transaction import SignedTransaction
from algosdk.v2client.algod import AlgodClient

from algorekey.algorand.client.accounts import (
    AccountDoesNotExist,
    get_auth_address,
    get_balance,
)
from algorekey.algorand.client.accounts.dispenser import (
    create_kmd_client,
    dispenser_from_kmd_wallet,
    dispenser_from_mnemonic,
)
from algorekey.algorand.client.accounts.error import (
    KmdClientError,
    DispenserNotFoundError,
)
from algorekey.algorand.client.model import (
    Account,
    AccountBalance,
    Address,
    LedgerRound,
    MicroAlgos,
    TxnId,
)
from algorekey.algorand.client.transactions import suggested_params_with_flat_fee
from algorekey.algorand.client.transactions.confirmation import (
    AlgodLedgerNode,
    ConfirmationWaiter,
    wait_for_confirmations,
)
from algorekey.algorand.client.transactions.error import ConfirmationError
from algorekey.algorand.client.transactions.payment import transfer_algo, close_account
from algorekey.algorand.client.transactions.rekey import rekey
from algorekey.apps.rekey_sweep.config import AppConfig
from algorekey.apps.rekey_sweep.errors import (
    NodeNotReady,
    AccountsNotCreated,
    BalanceError,
    FundingError,
    RekeyError,
    RekeyNotConfirmed,
    SweepError,
    InsufficientFunds,
)
from algorekey.core.logging import get_logger

# failures that abort a workflow step
_STEP_ERRORS = (
    ConfirmationError,
    AlgodHTTPError,
    AccountDoesNotExist,
    KmdClientError,
    DispenserNotFoundError,
    URLError,
    ConnectionError,
    TimeoutError,
)


@dataclass(slots=True, frozen=True)
class SweepResult:
    txid: TxnId
    # ALGO amount moved from account A to account B, excluding the fee
    amount: MicroAlgos
    confirmed_round: LedgerRound
    closed: bool


@dataclass(slots=True, frozen=True)
class WorkflowResult:
    account_a: Address
    account_b: Address
    funding: dict[TxnId, LedgerRound]
    rekey_txid: TxnId
    sweep: SweepResult
    balances: dict[str, AccountBalance]


def check_node(algod_client: AlgodClient) -> None:
    """
    :exception NodeNotReady: if the node cannot be reached or is in catchup mode
    """
    try:
        result: dict[str, Any] = algod_client.status()  # type: ignore
    except (AlgodHTTPError, URLError, ConnectionError, TimeoutError) as err:
        raise NodeNotReady(f"Failed to connect to Algorand node: {err}") from err

    if (catchup_time := result.get("catchup-time", 0)) > 0:
        raise NodeNotReady(
            f"Algorand node is not caught up: catchup_time={catchup_time}"
        )


class App:
    """
    Rekey-sweep app
    """

    account_a: Account | None = None
    account_b: Account | None = None

    def __init__(
        self,
        config: AppConfig,
        algod_client: AlgodClient | None = None,
        kmd_client: KMDClient | None = None,
    ):
        """
        :param algod_client: if not specified, then it is created from the config
        :param kmd_client: only used to look up the dispenser when no dispenser mnemonic is configured.
                           If not specified, then it is created from the config when needed.

        :exception NodeNotReady: if the Algorand node is not ready to accept transactions
        """
        if algod_client is None:
            algod_client = AlgodClient(
                algod_token=config.algod.token,
                algod_address=config.algod.url,
            )
        check_node(algod_client)

        self.config = config
        self.algod_client = algod_client
        self._kmd_client = kmd_client
        self._dispenser: Account | None = None
        # set to abort waiting for transaction confirmations
        self.cancel_event = Event()
        self._logger = get_logger(self)

    @classmethod
    def from_config_file(cls, file: Path) -> "App":
        """
        Constructs a new app instance from the specified TOML config file
        """
        return cls(AppConfig.from_file(file))

    @property
    def dispenser(self) -> Account:
        """
        The dispenser account is looked up on first use.
        """
        if self._dispenser is None:
            if self.config.dispenser.mnemonic is not None:
                self._dispenser = dispenser_from_mnemonic(self.config.dispenser.mnemonic)
            else:
                if self._kmd_client is None:
                    self._kmd_client = create_kmd_client(
                        url=self.config.kmd.url, token=self.config.kmd.token
                    )
                self._dispenser = dispenser_from_kmd_wallet(
                    kmd_client=self._kmd_client,
                    algod_client=self.algod_client,
                    wallet_name=self.config.kmd.wallet,
                    wallet_password=self.config.kmd.password,
                )
        return self._dispenser

    def create_accounts(self) -> tuple[Account, Account]:
        """
        Generates new accounts A and B. Any previously created accounts are replaced.
        """
        self.account_a = Account.generate()
        self.account_b = Account.generate()
        self._logger.info("created account A: %s", self.account_a.address)
        self._logger.info("created account B: %s", self.account_b.address)
        return self.account_a, self.account_b

    def get_balances(self) -> dict[str, AccountBalance]:
        """
        :return: ALGO balances keyed by "A" and "B"
        :exception BalanceError:
        """
        account_a, account_b = self._accounts()
        try:
            balances = {
                "A": get_balance(account_a.address, self.algod_client),
                "B": get_balance(account_b.address, self.algod_client),
            }
        except _STEP_ERRORS as err:
            raise BalanceError(f"Error getting account balances: {err}") from err
        for name, balance in balances.items():
            self._logger.info("account %s balance: %s microalgos", name, balance.amount)
        return balances

    def fund_accounts(self) -> dict[TxnId, LedgerRound]:
        """
        Funds both accounts from the dispenser. Both payments are submitted before waiting for their confirmations.

        :return: confirmed round per funding transaction
        :exception FundingError:
        """
        account_a, account_b = self._accounts()
        amount = self.config.workflow.funding_amount
        try:
            dispenser = self.dispenser
            suggested_params = suggested_params_with_flat_fee(self.algod_client)
            txids = [
                self._send(
                    transfer_algo(
                        sender=dispenser.address,
                        receiver=account.address,
                        amount=amount,
                        suggested_params=suggested_params,
                    ).sign(dispenser.private_key)
                )
                for account in (account_a, account_b)
            ]
            confirmed = wait_for_confirmations(
                lambda: AlgodLedgerNode(self.algod_client),
                txids,
                self.cancel_event,
                **self.config.confirmation.waiter_kwargs(),
            )
        except _STEP_ERRORS as err:
            raise FundingError(f"Error funding accounts: {err}") from err

        self._logger.info("funded both accounts with %s microalgos each", amount)
        return confirmed

    def rekey_account(self) -> TxnId:
        """
        Rekeys account A to account B. The rekey is verified on-chain after the transaction is confirmed.

        :exception RekeyError:
        """
        account_a, account_b = self._accounts()
        try:
            txn = rekey(
                account=account_a.address,
                rekey_to=account_b.address,
                suggested_params=suggested_params_with_flat_fee(self.algod_client),
            )
            txid = self._send(txn.sign(account_a.private_key))
            self._wait(txid)
            auth_address = get_auth_address(account_a.address, self.algod_client)
        except _STEP_ERRORS as err:
            raise RekeyError(f"Error rekeying account: {err}") from err

        if auth_address != account_b.address:
            raise RekeyNotConfirmed(
                f"account A is not rekeyed to account B: auth-addr={auth_address}"
            )
        self._logger.info(
            "rekeyed account A to account B: %s -> %s",
            account_a.address,
            account_b.address,
        )
        return txid

    def sweep(self) -> SweepResult:
        """
        Transfers account A's ALGO balance to account B. The transaction is signed by account B.

        If the workflow is configured to close account A, then the entire balance is transferred and account A is
        removed from the ledger. Otherwise, account A's min balance is left behind.

        Account A must already be rekeyed to account B on-chain.

        :exception RekeyNotConfirmed: if account A is not rekeyed to account B
        :exception InsufficientFunds: if account A's balance does not cover the transaction fee
        :exception SweepError:
        """
        account_a, account_b = self._accounts()
        close = self.config.workflow.close_account
        try:
            auth_address = get_auth_address(account_a.address, self.algod_client)
            if auth_address != account_b.address:
                raise RekeyNotConfirmed(
                    f"account A must be rekeyed to account B before sweeping: auth-addr={auth_address}"
                )

            balance = get_balance(account_a.address, self.algod_client)
            suggested_params = suggested_params_with_flat_fee(self.algod_client)
            spendable = balance.amount if close else balance.available
            amount = MicroAlgos(spendable - suggested_params.fee)
            if amount <= 0:
                raise InsufficientFunds(
                    f"Insufficient funds for transfer: balance={balance.amount} min_balance={balance.min_balance} "
                    f"fee={suggested_params.fee}"
                )

            if close:
                txn = close_account(
                    sender=account_a.address,
                    close_to=account_b.address,
                    suggested_params=suggested_params,
                )
            else:
                txn = transfer_algo(
                    sender=account_a.address,
                    receiver=account_b.address,
                    amount=amount,
                    suggested_params=suggested_params,
                )
            # account B is account A's authorized account
            txid = self._send(txn.sign(account_b.private_key))
            confirmed_round = self._wait(txid)
        except _STEP_ERRORS as err:
            raise SweepError(f"Error transferring Algos: {err}") from err

        self._logger.info(
            "transferred %s microalgos from account A to account B", amount
        )
        return SweepResult(
            txid=txid, amount=amount, confirmed_round=confirmed_round, closed=close
        )

    def run(self) -> WorkflowResult:
        """
        Runs the complete workflow using newly generated accounts.

        :exception WorkflowError: identifies the step that failed
        """
        account_a, account_b = self.create_accounts()

        self._logger.info("initial balances")
        self.get_balances()

        funding = self.fund_accounts()
        self._logger.info("balances after funding")
        self.get_balances()

        rekey_txid = self.rekey_account()
        sweep_result = self.sweep()

        self._logger.info("final balances")
        balances = self.get_balances()

        return WorkflowResult(
            account_a=account_a.address,
            account_b=account_b.address,
            funding=funding,
            rekey_txid=rekey_txid,
            sweep=sweep_result,
            balances=balances,
        )

    def _accounts(self) -> tuple[Account, Account]:
        if self.account_a is None or self.account_b is None:
            raise AccountsNotCreated
        return self.account_a, self.account_b

    def _send(self, signed_txn: SignedTransaction) -> TxnId:
        txid = TxnId(self.algod_client.send_transaction(signed_txn))
        self._logger.debug("submitted transaction: %s", txid)
        return txid

    def _wait(self, txid: TxnId) -> LedgerRound:
        return ConfirmationWaiter(
            AlgodLedgerNode(self.algod_client),
            **self.config.confirmation.waiter_kwargs(),
        ).wait(txid, self.cancel_event)
