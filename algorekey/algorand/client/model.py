"""
Algorand domain model

https://developer.algorand.org/docs/get-details/accounts/
"""

from dataclasses import dataclass, field
from typing import NewType, Any

from algosdk import account, mnemonic

# Algorand account address. The address is 58 characters long
# https://developer.algorand.org/docs/get-details/accounts/#transformation-public-key-to-algorand-address
Address = NewType("Address", str)

MicroAlgos = NewType("MicroAlgos", int)

# assigned by the node when the transaction is submitted
TxnId = NewType("TxnId", str)

# finalized block number
LedgerRound = NewType("LedgerRound", int)


@dataclass(slots=True, frozen=True)
class Pending:
    """
    Transaction has not yet been included in a finalized round
    """


@dataclass(slots=True, frozen=True)
class Confirmed:
    """
    Transaction was included in the specified round
    """

    round: LedgerRound


@dataclass(slots=True, frozen=True)
class Failed:
    """
    The node reported that the transaction will never be included, e.g., it was evicted from the transaction pool
    """

    reason: str


ConfirmationStatus = Pending | Confirmed | Failed


@dataclass(slots=True, frozen=True)
class AccountBalance:
    """
    Account ALGO balance
    """

    amount: MicroAlgos
    min_balance: MicroAlgos

    @property
    def available(self) -> MicroAlgos:
        """
        :return: ALGO amount that can be spent without closing the account
        """
        return MicroAlgos(max(self.amount - self.min_balance, 0))

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "AccountBalance":
        """
        :param data: account info returned by algod. Required keys: 'amount'. 'min-balance' defaults to 0.
        """
        return cls(
            amount=MicroAlgos(data["amount"]),
            min_balance=MicroAlgos(data.get("min-balance", 0)),
        )


@dataclass(slots=True)
class Mnemonic:
    """Mnemonics are 25 word lists that represent private keys.

    PrivateKey <-> Mnemonic

    https://developer.algorand.org/docs/get-details/accounts/#transformation-private-key-to-25-word-mnemonic
    """

    word_list: tuple[str, ...]

    @classmethod
    def from_word_list(cls, word_list: str) -> "Mnemonic":
        """
        :param word_list: 25 word whitespace delimited list
        """
        return cls(tuple(word_list.strip().split()))

    def __post_init__(self):
        """
        :exception ValueError: if the mnemonic does not consist of 25 words
        """
        if len(self.word_list) != 25:
            raise ValueError("mnemonic must consist of 25 words")

    def to_private_key(self) -> str:
        """Converts the word list to the base64 encoded account private key"""
        return mnemonic.to_private_key(str(self))

    def __str__(self) -> str:
        return " ".join(self.word_list)


@dataclass(slots=True, frozen=True)
class Account:
    """
    Algorand account keypair
    """

    address: Address
    private_key: str = field(repr=False)

    @classmethod
    def generate(cls) -> "Account":
        """
        Generates a new random keypair
        """
        private_key, address = account.generate_account()
        return cls(address=Address(address), private_key=private_key)

    @classmethod
    def from_mnemonic(cls, value: Mnemonic) -> "Account":
        private_key = value.to_private_key()
        return cls(
            address=Address(account.address_from_private_key(private_key)),
            private_key=private_key,
        )

    @property
    def mnemonic(self) -> Mnemonic:
        return Mnemonic.from_word_list(mnemonic.from_private_key(self.private_key))
