"""
Transaction confirmation errors
"""

import functools
from typing import Callable, Any
from urllib.error import URLError

from algosdk.error import AlgodHTTPError

from algorekey.algorand.client.model import TxnId, LedgerRound


class ConfirmationError(Exception):
    """
    Base exception for transaction confirmation failures
    """


class TerminalRejection(ConfirmationError):
    """
    The node reported that the transaction will never be included, e.g., it expired or was evicted from the pool.
    Resubmitting the same transaction will not help.
    """

    def __init__(self, txid: TxnId, reason: str):
        super().__init__(f"transaction rejected: {txid}: {reason}")
        self.txid = txid
        self.reason = reason


class ConfirmationTimeout(ConfirmationError):
    """
    The round or wall-clock bound was exceeded before the transaction was confirmed.

    The transaction may still be pending, i.e., it is not known to have failed.
    """

    def __init__(self, txid: TxnId, last_observed_round: LedgerRound):
        super().__init__(
            f"transaction not confirmed: {txid}: last_observed_round={last_observed_round}"
        )
        self.txid = txid
        self.last_observed_round = last_observed_round


class NodeUnavailable(ConfirmationError):
    """
    Transport level failure talking to the node
    """


class ConfirmationCancelled(ConfirmationError):
    """
    The caller cancelled waiting for the transaction
    """

    def __init__(self, txid: TxnId):
        super().__init__(f"waiting for transaction was cancelled: {txid}")
        self.txid = txid


def handle_algod_transport_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator function that maps transport level failures to NodeUnavailable:

    - urllib.error.URLError, ConnectionError, TimeoutError
    - algosdk.error.AlgodHTTPError without a status code or with a 5xx status code

    Any other AlgodHTTPError is re-raised.
    """

    @functools.wraps(func)
    def wrapped_func(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AlgodHTTPError as err:
            if err.code is None or err.code >= 500:
                raise NodeUnavailable(str(err)) from err
            raise
        except (URLError, ConnectionError, TimeoutError) as err:
            raise NodeUnavailable(str(err)) from err

    return wrapped_func
