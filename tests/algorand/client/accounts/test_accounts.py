import unittest

from algosdk.error import AlgodHTTPError

from algorekey.algorand.client.accounts import (
    AccountDoesNotExist,
    get_auth_address,
    get_auth_address_callable,
    get_balance,
)
from algorekey.algorand.client.model import Account, Address
from tests.algorand.test_support import AlgorandTestCase, LocalLedgerAlgodClient


class AlgodClientMock(LocalLedgerAlgodClient):
    def account_info(self, address, exclude=None, **kwargs):
        raise AlgodHTTPError("account does not exist", 404)


class AccountsTestCase(AlgorandTestCase):
    def test_get_auth_address(self):
        algod_client = LocalLedgerAlgodClient()
        account = self.create_funded_account(algod_client)
        auth_account = self.create_funded_account(algod_client)

        with self.subTest("account is not rekeyed"):
            self.assertEqual(
                account.address, get_auth_address(account.address, algod_client)
            )

        with self.subTest("account is rekeyed"):
            algod_client.auth_addrs[account.address] = auth_account.address
            self.assertEqual(
                auth_account.address, get_auth_address(account.address, algod_client)
            )
            get_auth_addr = get_auth_address_callable(algod_client)
            self.assertEqual(auth_account.address, get_auth_addr(account.address))

        with self.subTest("account does not exist"):
            with self.assertRaises(AccountDoesNotExist):
                get_auth_address(account.address, AlgodClientMock())

    def test_get_balance(self):
        algod_client = LocalLedgerAlgodClient()
        account = self.create_funded_account(algod_client, amount=1_000_000)

        balance = get_balance(account.address, algod_client)
        self.assertEqual(1_000_000, balance.amount)
        self.assertEqual(100_000, balance.min_balance)
        self.assertEqual(900_000, balance.available)

        with self.subTest("unfunded account"):
            balance = get_balance(Account.generate().address, algod_client)
            self.assertEqual(0, balance.amount)

        with self.subTest("account does not exist"):
            with self.assertRaises(AccountDoesNotExist):
                get_balance(Address(account.address), AlgodClientMock())


if __name__ == "__main__":
    unittest.main()
