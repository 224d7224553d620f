"""
Locates the dispenser account, i.e., the pre-funded account used to seed new accounts on a test network.

On LocalNet and the sandbox, the accounts in the KMD `unencrypted-default-wallet` are pre-funded.

https://developer.algorand.org/docs/get-details/accounts/create/#wallet-derived-kmd
"""
import logging

from algosdk import kmd
from algosdk.v2client.algod import AlgodClient
from algosdk.wallet import Wallet as KmdWallet

from algorekey.algorand.client.accounts import get_balance
from algorekey.algorand.client.accounts.error import (
    handle_kmd_client_errors,
    WalletDoesNotExistError,
    DispenserNotFoundError,
)
from algorekey.algorand.client.model import Account, Address, Mnemonic

DEFAULT_KMD_WALLET_NAME = "unencrypted-default-wallet"
DEFAULT_KMD_WALLET_PASSWORD = ""

logger = logging.getLogger(__name__)


def create_kmd_client(url: str, token: str) -> kmd.KMDClient:
    """
    NOTE: KMDClient is a stateless HTTP client. The KMD server can be restarted and the client will continue working.
    """
    return kmd.KMDClient(kmd_address=url, kmd_token=token)


def dispenser_from_mnemonic(value: Mnemonic) -> Account:
    """
    The dispenser account is recovered from its private key mnemonic
    """
    return Account.from_mnemonic(value)


@handle_kmd_client_errors
def dispenser_from_kmd_wallet(
    kmd_client: kmd.KMDClient,
    algod_client: AlgodClient,
    wallet_name: str = DEFAULT_KMD_WALLET_NAME,
    wallet_password: str = DEFAULT_KMD_WALLET_PASSWORD,
) -> Account:
    """
    Selects the wallet account with the highest ALGO balance and exports its private key.

    :exception WalletDoesNotExistError: if the wallet does not exist
    :exception InvalidWalletPasswordError: if the wallet password is wrong
    :exception DispenserNotFoundError: if none of the wallet accounts hold any ALGO
    """

    # algosdk creates the wallet if it does not exist
    if wallet_name not in (wallet["name"] for wallet in kmd_client.list_wallets()):
        raise WalletDoesNotExistError(wallet_name)

    wallet = KmdWallet(
        wallet_name=wallet_name,
        wallet_pswd=wallet_password,
        kmd_client=kmd_client,
    )
    try:
        balances = {
            Address(address): get_balance(Address(address), algod_client).amount
            for address in wallet.list_keys()
        }
        if not balances or max(balances.values()) == 0:
            raise DispenserNotFoundError(
                f"wallet does not contain a funded account: {wallet_name}"
            )

        address = max(balances, key=lambda addr: balances[addr])
        logger.info(
            "dispenser account: %s (balance = %s microalgos)",
            address,
            balances[address],
        )
        return Account(address=address, private_key=wallet.export_key(address))
    finally:
        wallet.release_handle()
