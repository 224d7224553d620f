"""
Waits for submitted transactions to be confirmed.

The waiter polls on round boundaries: each iteration blocks until the next round is finalized instead of sleeping for
a fixed interval. Waiting is bounded by rounds and/or wall-clock time unless the caller explicitly opts in to waiting
indefinitely.
"""
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import timedelta
from threading import Event
from typing import Protocol, Callable, TypeVar, Iterable

from algosdk.error import AlgodHTTPError
from algosdk.v2client.algod import AlgodClient

from algorekey.algorand.client.model import (
    TxnId,
    LedgerRound,
    ConfirmationStatus,
    Pending,
    Confirmed,
    Failed,
)
from algorekey.algorand.client.transactions.error import (
    handle_algod_transport_errors,
    TerminalRejection,
    ConfirmationTimeout,
    NodeUnavailable,
    ConfirmationCancelled,
)
from algorekey.core.logging import get_logger

T = TypeVar("T")


class LedgerNode(Protocol):
    """
    Minimal view of a ledger node required to wait for transaction confirmations.

    Each method may raise NodeUnavailable for transport level failures.
    """

    def current_round(self) -> LedgerRound:
        """
        :return: latest finalized round known to the node
        """
        ...

    def status_of(self, txid: TxnId) -> ConfirmationStatus:
        """
        :return: current transaction status
        """
        ...

    def await_round(self, round_: LedgerRound) -> None:
        """
        Blocks until the specified round, or a later round, has been finalized.
        """
        ...


class AlgodLedgerNode:
    """
    LedgerNode backed by an Algorand node's algod REST API
    """

    def __init__(self, algod_client: AlgodClient):
        self.algod_client = algod_client

    @handle_algod_transport_errors
    def current_round(self) -> LedgerRound:
        return LedgerRound(self.algod_client.status()["last-round"])

    @handle_algod_transport_errors
    def status_of(self, txid: TxnId) -> ConfirmationStatus:
        """
        https://developer.algorand.org/docs/rest-apis/algod/#get-v2transactionspendingtxid

        - confirmed-round > 0 -> Confirmed
        - non-empty pool-error -> Failed
        - transaction unknown to the node (404) -> Failed
        """
        try:
            pending_txn_info = self.algod_client.pending_transaction_info(txid)
        except AlgodHTTPError as err:
            if err.code == 404:
                return Failed(f"transaction not found: {txid}")
            raise

        confirmed_round = pending_txn_info.get("confirmed-round") or 0
        if confirmed_round > 0:
            return Confirmed(LedgerRound(confirmed_round))
        if pool_error := pending_txn_info.get("pool-error"):
            return Failed(pool_error)
        return Pending()

    @handle_algod_transport_errors
    def await_round(self, round_: LedgerRound) -> None:
        # algod returns once a block after the specified round has been finalized
        self.algod_client.status_after_block(round_ - 1)


class ConfirmationWaiter:
    """
    Waits for a transaction to be confirmed by polling the node once per round.

    The waiter is stateless between calls. Independent transactions can be waited on concurrently using separate
    waiter instances, each with its own node connection.
    """

    def __init__(
        self,
        node: LedgerNode,
        max_rounds: int | None = None,
        timeout: timedelta | None = None,
        wait_indefinitely: bool = False,
        max_node_retries: int = 3,
        retry_backoff: timedelta = timedelta(milliseconds=500),
    ):
        """
        :param node: ledger node
        :param max_rounds: max number of rounds to wait for the transaction to be confirmed
        :param timeout: max wall-clock duration to wait for the transaction to be confirmed
        :param wait_indefinitely: must be set to True if neither `max_rounds` nor `timeout` is specified
        :param max_node_retries: how many times a node request is retried when the node is unavailable
        :param retry_backoff: delay before the first retry, which is doubled on each subsequent retry

        :exception ValueError: if the waiter would be unbounded without `wait_indefinitely` or a bound is negative
        """
        if max_rounds is None and timeout is None and not wait_indefinitely:
            raise ValueError(
                "max_rounds or timeout must be specified, unless wait_indefinitely is True"
            )
        if max_rounds is not None and max_rounds < 0:
            raise ValueError("max_rounds must not be negative")
        if timeout is not None and timeout < timedelta(0):
            raise ValueError("timeout must not be negative")
        if max_node_retries < 0:
            raise ValueError("max_node_retries must not be negative")

        self.node = node
        self.max_rounds = max_rounds
        self.timeout = timeout
        self.max_node_retries = max_node_retries
        self.retry_backoff = retry_backoff
        self._logger = get_logger(self)

    def wait(self, txid: TxnId, cancel_event: Event | None = None) -> LedgerRound:
        """
        Blocks until the transaction is confirmed.

        :param txid: submitted transaction
        :param cancel_event: when set, waiting is aborted at the next round boundary or retry backoff
        :return: round in which the transaction was confirmed

        :exception TerminalRejection: the transaction will never be confirmed
        :exception ConfirmationTimeout: the round or wall-clock bound was exceeded
        :exception NodeUnavailable: the node could not be reached after retrying
        :exception ConfirmationCancelled: `cancel_event` was set
        """
        deadline = (
            None if self.timeout is None else time.monotonic() + self.timeout.total_seconds()
        )
        last_observed_round = self._call_node(txid, cancel_event, self.node.current_round)
        rounds_waited = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                self._logger.info("cancelled waiting for transaction: %s", txid)
                raise ConfirmationCancelled(txid)

            status = self._call_node(txid, cancel_event, self.node.status_of, txid)
            match status:
                case Confirmed(round=confirmed_round):
                    self._logger.info(
                        "transaction confirmed: %s: round=%s", txid, confirmed_round
                    )
                    return confirmed_round
                case Failed(reason=reason):
                    self._logger.error("transaction rejected: %s: %s", txid, reason)
                    raise TerminalRejection(txid, reason)

            if self.max_rounds is not None and rounds_waited >= self.max_rounds:
                self._logger.error(
                    "transaction not confirmed within %s rounds: %s", self.max_rounds, txid
                )
                raise ConfirmationTimeout(txid, last_observed_round)
            if deadline is not None and time.monotonic() >= deadline:
                self._logger.error(
                    "transaction not confirmed within %s: %s", self.timeout, txid
                )
                raise ConfirmationTimeout(txid, last_observed_round)

            next_round = LedgerRound(last_observed_round + 1)
            self._logger.debug("waiting for round %s: %s", next_round, txid)
            self._call_node(txid, cancel_event, self.node.await_round, next_round)
            last_observed_round = next_round
            rounds_waited += 1

    def _call_node(
        self,
        txid: TxnId,
        cancel_event: Event | None,
        func: Callable[..., T],
        *args,
    ) -> T:
        attempt = 0
        while True:
            try:
                return func(*args)
            except NodeUnavailable as err:
                if attempt >= self.max_node_retries:
                    self._logger.error(
                        "node unavailable after %s retries: %s", attempt, err
                    )
                    raise
                delay = self.retry_backoff.total_seconds() * 2**attempt
                attempt += 1
                self._logger.warning(
                    "node unavailable - retry %s/%s in %ss: %s",
                    attempt,
                    self.max_node_retries,
                    delay,
                    err,
                )
                if cancel_event is None:
                    time.sleep(delay)
                elif cancel_event.wait(delay):
                    raise ConfirmationCancelled(txid) from err


def wait_for_confirmations(
    node_factory: Callable[[], LedgerNode],
    txids: Iterable[TxnId],
    cancel_event: Event | None = None,
    **waiter_kwargs,
) -> dict[TxnId, LedgerRound]:
    """
    Waits for independent transactions in parallel, using a separate waiter and node per transaction.

    :param node_factory: creates the node used by each waiter
    :param waiter_kwargs: ConfirmationWaiter constructor args
    :return: confirmed round per transaction

    :exception ConfirmationError: the first waiter to fail determines the error, which is raised once all waiters
                                  are done. The remaining waiters are not stopped early: they run until confirmed,
                                  failed, bounded or cancelled via `cancel_event`.
    """
    txids = list(dict.fromkeys(txids))
    if not txids:
        return {}

    def wait(txid: TxnId) -> LedgerRound:
        return ConfirmationWaiter(node_factory(), **waiter_kwargs).wait(txid, cancel_event)

    with ThreadPoolExecutor(
        max_workers=len(txids), thread_name_prefix="confirmation-waiter"
    ) as executor:
        futures = {executor.submit(wait, txid): txid for txid in txids}
        for future in as_completed(futures):
            future.result()
    return {txid: future.result() for future, txid in futures.items()}
