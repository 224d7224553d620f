import unittest

from algosdk.error import AlgodHTTPError

from algorekey.algorand.client.accounts import get_auth_address
from algorekey.algorand.client.model import MicroAlgos, TxnId
from algorekey.algorand.client.transactions import suggested_params_with_flat_fee
from algorekey.algorand.client.transactions.confirmation import (
    AlgodLedgerNode,
    ConfirmationWaiter,
)
from algorekey.algorand.client.transactions.payment import transfer_algo
from algorekey.algorand.client.transactions.rekey import rekey, rekey_back
from tests.algorand.test_support import AlgorandTestCase, LocalLedgerAlgodClient


class RekeyTestCase(AlgorandTestCase):
    def test_rekey_account_transaction_and_then_rekey_back(self):
        """
        Test Steps
        ----------
        1. generate and fund 2 accounts
        2. rekey account to the auth account
        3. confirm that the account has been rekeyed
        4. transfer ALGO from the account signed by the auth account
        5. rekey the account back to itself using the auth account
        6. confirm that the account's authorized account has been reset to itself
        """
        algod_client = LocalLedgerAlgodClient()
        waiter = ConfirmationWaiter(AlgodLedgerNode(algod_client), max_rounds=4)
        account = self.create_funded_account(algod_client)
        auth_account = self.create_funded_account(algod_client)

        def send_and_wait(signed_txn):
            waiter.wait(TxnId(algod_client.send_transaction(signed_txn)))

        txn = rekey(
            account=account.address,
            rekey_to=auth_account.address,
            suggested_params=suggested_params_with_flat_fee(algod_client),
        )
        self.assertEqual(account.address, txn.sender)
        self.assertEqual(account.address, txn.receiver)
        self.assertEqual(0, txn.amt)
        self.assertEqual(auth_account.address, txn.rekey_to)
        send_and_wait(txn.sign(account.private_key))
        self.assertEqual(
            auth_account.address, get_auth_address(account.address, algod_client)
        )

        with self.subTest("rekeyed account can no longer sign for itself"):
            txn = transfer_algo(
                sender=account.address,
                receiver=auth_account.address,
                amount=MicroAlgos(1_000),
                suggested_params=suggested_params_with_flat_fee(algod_client),
            )
            with self.assertRaises(AlgodHTTPError):
                algod_client.send_transaction(txn.sign(account.private_key))
            send_and_wait(txn.sign(auth_account.private_key))

        txn = rekey_back(
            account=account.address,
            suggested_params=suggested_params_with_flat_fee(algod_client),
        )
        self.assertEqual(account.address, txn.rekey_to)
        send_and_wait(txn.sign(auth_account.private_key))
        self.assertEqual(
            account.address, get_auth_address(account.address, algod_client)
        )


if __name__ == "__main__":
    unittest.main()
