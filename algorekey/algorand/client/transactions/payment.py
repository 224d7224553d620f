from algosdk.transaction import PaymentTxn

from algorekey.algorand.client.model import Address, MicroAlgos
from algorekey.algorand.client.transactions import SuggestedParams, create_lease


def transfer_algo(
    *,
    sender: Address,
    receiver: Address,
    amount: MicroAlgos,
    suggested_params: SuggestedParams,
    note: str | None = None
) -> PaymentTxn:
    """
    The payment transaction is configured with a lease to protect against from the payment transaction being sent twice.
    """

    return PaymentTxn(
        sender=sender,
        receiver=receiver,
        amt=amount,
        sp=suggested_params,
        lease=create_lease(),
        note=None if note is None else note.encode(),
    )


def close_account(
    *,
    sender: Address,
    close_to: Address,
    suggested_params: SuggestedParams,
    note: str | None = None
) -> PaymentTxn:
    """
    Transfers the sender's entire remaining ALGO balance to `close_to`, which removes the sender account from the ledger.

    NOTE: if the sender has been rekeyed, then the transaction must be signed by its authorized account.
    """

    return PaymentTxn(
        sender=sender,
        receiver=close_to,
        amt=0,
        close_remainder_to=close_to,
        sp=suggested_params,
        lease=create_lease(),
        note=None if note is None else note.encode(),
    )
