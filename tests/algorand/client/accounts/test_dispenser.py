import unittest
from urllib.error import URLError

from algosdk.error import KMDHTTPError
from algosdk.kmd import KMDClient

from algorekey.algorand.client.accounts.dispenser import (
    DEFAULT_KMD_WALLET_NAME,
    DEFAULT_KMD_WALLET_PASSWORD,
    dispenser_from_kmd_wallet,
    dispenser_from_mnemonic,
)
from algorekey.algorand.client.accounts.error import (
    DispenserNotFoundError,
    InvalidKmdTokenError,
    InvalidWalletPasswordError,
    KmdUrlError,
    WalletDoesNotExistError,
)
from algorekey.algorand.client.model import Account
from tests.algorand.test_support import AlgorandTestCase, LocalLedgerAlgodClient


class KMDClientMock(KMDClient):
    """
    Single wallet KMD server
    """

    def __init__(
        self,
        accounts: list[Account],
        wallet_name: str = DEFAULT_KMD_WALLET_NAME,
        wallet_password: str = DEFAULT_KMD_WALLET_PASSWORD,
        error: Exception | None = None,
    ):
        super().__init__("a" * 64, "http://localhost:4002")
        self.accounts = {account.address: account for account in accounts}
        self.wallet_name = wallet_name
        self.wallet_password = wallet_password
        self.error = error
        self.released_handles: list[str] = []

    def list_wallets(self, **kwargs):
        if self.error:
            raise self.error
        return [{"id": "wallet-id", "name": self.wallet_name}]

    def create_wallet(self, name, pswd, driver_name="sqlite", master_deriv_key=None, **kwargs):
        raise AssertionError("wallet should not be created")

    def init_wallet_handle(self, id, password, **kwargs):
        if password != self.wallet_password:
            raise KMDHTTPError("wrong password")
        return "wallet-handle"

    def get_wallet(self, handle, **kwargs):
        return {"wallet": {"id": "wallet-id", "name": self.wallet_name}}

    def list_keys(self, handle, **kwargs):
        return list(self.accounts)

    def export_key(self, handle, password, address, **kwargs):
        return self.accounts[address].private_key

    def release_wallet_handle(self, handle, **kwargs):
        self.released_handles.append(handle)
        return True


class DispenserTestCase(AlgorandTestCase):
    def test_dispenser_from_mnemonic(self):
        account = Account.generate()
        self.assertEqual(account, dispenser_from_mnemonic(account.mnemonic))

    def test_dispenser_from_kmd_wallet(self):
        algod_client = LocalLedgerAlgodClient()
        accounts = [
            self.create_funded_account(algod_client, amount=amount)
            for amount in (1_000_000, 4_000_000_000, 2_000_000)
        ]
        kmd_client = KMDClientMock(accounts)

        dispenser = dispenser_from_kmd_wallet(kmd_client, algod_client)
        self.assertEqual(accounts[1], dispenser)
        self.assertEqual(["wallet-handle"], kmd_client.released_handles)

    def test_no_funded_account(self):
        algod_client = LocalLedgerAlgodClient()
        with self.subTest("empty wallet"):
            with self.assertRaises(DispenserNotFoundError):
                dispenser_from_kmd_wallet(KMDClientMock([]), algod_client)

        with self.subTest("wallet accounts have zero balance"):
            kmd_client = KMDClientMock([Account.generate()])
            with self.assertRaises(DispenserNotFoundError):
                dispenser_from_kmd_wallet(kmd_client, algod_client)
            self.assertEqual(["wallet-handle"], kmd_client.released_handles)

    def test_kmd_errors(self):
        algod_client = LocalLedgerAlgodClient()
        account = self.create_funded_account(algod_client)

        with self.subTest("wallet does not exist"):
            with self.assertRaises(WalletDoesNotExistError):
                dispenser_from_kmd_wallet(
                    KMDClientMock([account]), algod_client, wallet_name="foo"
                )

        with self.subTest("wrong password"):
            with self.assertRaises(InvalidWalletPasswordError):
                dispenser_from_kmd_wallet(
                    KMDClientMock([account]), algod_client, wallet_password="bar"
                )

        with self.subTest("invalid API token"):
            kmd_client = KMDClientMock(
                [account], error=KMDHTTPError("invalid API token")
            )
            with self.assertRaises(InvalidKmdTokenError):
                dispenser_from_kmd_wallet(kmd_client, algod_client)

        with self.subTest("invalid URL"):
            kmd_client = KMDClientMock([account], error=URLError("connection refused"))
            with self.assertRaises(KmdUrlError):
                dispenser_from_kmd_wallet(kmd_client, algod_client)


if __name__ == "__main__":
    unittest.main()
