"""
Algorand account related utility functions
"""
import functools
from typing import Callable

from algosdk.error import AlgodHTTPError
from algosdk.v2client.algod import AlgodClient

from algorekey.algorand.client.model import Address, AccountBalance


class AccountDoesNotExist(Exception):
    """
    Raised if the Algorand account does not exist on-chain.
    """


def get_auth_address(address: Address, algod_client: AlgodClient) -> Address:
    """
    Returns the authorized signing account for the specified address. This only applies to rekeyed acccounts.
    If the account is not rekeyed, then the account is the authorized account, i.e., the account signs for itself.
    """

    try:
        account_info = algod_client.account_info(address)
    except AlgodHTTPError as err:
        if err.code == 404:
            raise AccountDoesNotExist(address) from err
        raise
    auth_addr = "auth-addr"
    if account_info.get(auth_addr):
        return Address(account_info[auth_addr])
    return address


def get_auth_address_callable(algod_client: AlgodClient) -> Callable[[Address], Address]:
    """
    Binds `get_auth_address` to the specified AlgodClient
    """
    return functools.partial(get_auth_address, algod_client=algod_client)


def get_balance(address: Address, algod_client: AlgodClient) -> AccountBalance:
    """
    Returns the account's ALGO balance.

    Accounts that have never been funded are reported by algod with a zero balance.
    """
    try:
        account_info = algod_client.account_info(address, exclude="all")
    except AlgodHTTPError as err:
        if err.code == 404:
            raise AccountDoesNotExist(address) from err
        raise

    return AccountBalance.from_data(account_info)
