"""
Rekey-sweep workflow errors
"""


class WorkflowError(Exception):
    """
    Base exception for workflow step failures
    """


class NodeNotReady(WorkflowError):
    """
    The Algorand node cannot be reached or is still catching up with the network.
    While in catchup mode, submitting transactions will fail.
    """


class AccountsNotCreated(WorkflowError):
    """
    Accounts A and B must be created before running the workflow steps
    """


class FundingError(WorkflowError):
    """
    Failed to fund the accounts from the dispenser
    """


class RekeyError(WorkflowError):
    """
    Failed to rekey account A to account B
    """


class RekeyNotConfirmed(RekeyError):
    """
    Account A's authorized account on-chain is not account B
    """


class SweepError(WorkflowError):
    """
    Failed to sweep account A's balance into account B
    """


class InsufficientFunds(SweepError):
    """
    Account A's spendable balance does not cover the transaction fee
    """


class BalanceError(WorkflowError):
    """
    Failed to look up the account balances
    """
