import unittest
from dataclasses import FrozenInstanceError
from typing import Iterable

from algosdk import mnemonic

from algorekey.algorand.client.model import (
    Account,
    AccountBalance,
    Confirmed,
    Failed,
    LedgerRound,
    Mnemonic,
    Pending,
)
from tests.test_support import AlgorekeyTestCase


class MnemonicTestCase(AlgorekeyTestCase):
    def test_valid_mnemonic(self):
        def word_list() -> Iterable[str]:
            return map(str, range(25))

        value = Mnemonic(tuple(word_list()))
        self.assertEqual(str(value), " ".join(word_list()))

        value = Mnemonic.from_word_list(" ".join(word_list()))
        self.assertEqual(str(value), " ".join(word_list()))

    def test_invalid_mnemonic(self):
        def word_list() -> Iterable[str]:
            return map(str, range(24))

        with self.assertRaises(ValueError):
            Mnemonic(tuple(word_list()))

        with self.assertRaises(ValueError):
            Mnemonic.from_word_list(" ".join(word_list()))

    def test_to_private_key(self):
        account = Account.generate()
        value = Mnemonic.from_word_list(mnemonic.from_private_key(account.private_key))
        self.assertEqual(value.to_private_key(), account.private_key)


class AccountTestCase(AlgorekeyTestCase):
    def test_generate(self):
        account_1 = Account.generate()
        account_2 = Account.generate()
        self.assertNotEqual(account_1.address, account_2.address)
        self.assertEqual(58, len(account_1.address))

    def test_from_mnemonic(self):
        account = Account.generate()
        self.assertEqual(account, Account.from_mnemonic(account.mnemonic))

    def test_private_key_is_not_in_repr(self):
        account = Account.generate()
        self.assertIn(account.address, repr(account))
        self.assertNotIn(account.private_key, repr(account))


class AccountBalanceTestCase(AlgorekeyTestCase):
    def test_from_data(self):
        balance = AccountBalance.from_data({"amount": 1_500_000, "min-balance": 100_000})
        self.assertEqual(1_500_000, balance.amount)
        self.assertEqual(100_000, balance.min_balance)
        self.assertEqual(1_400_000, balance.available)

    def test_available_is_never_negative(self):
        balance = AccountBalance.from_data({"amount": 50_000, "min-balance": 100_000})
        self.assertEqual(0, balance.available)

        balance = AccountBalance.from_data({"amount": 0})
        self.assertEqual(0, balance.min_balance)
        self.assertEqual(0, balance.available)


class ConfirmationStatusTestCase(AlgorekeyTestCase):
    def test_terminal_status_is_immutable(self):
        confirmed = Confirmed(LedgerRound(103))
        with self.assertRaises(FrozenInstanceError):
            confirmed.round = LedgerRound(104)  # type: ignore

        failed = Failed("transaction expired")
        with self.assertRaises(FrozenInstanceError):
            failed.reason = "overspend"  # type: ignore

    def test_equality(self):
        self.assertEqual(Pending(), Pending())
        self.assertEqual(Confirmed(LedgerRound(1)), Confirmed(LedgerRound(1)))
        self.assertNotEqual(Confirmed(LedgerRound(1)), Failed("1"))


if __name__ == "__main__":
    unittest.main()
