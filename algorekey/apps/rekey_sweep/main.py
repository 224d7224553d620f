"""
Rekey-sweep shell

Run a single command and exit:

    algorekey --config-file localnet.toml run

or start the interactive shell by omitting the command.
"""
import json
from pathlib import Path

import click
from click_shell import shell  # type: ignore

from algorekey.algorand.client.model import AccountBalance
from algorekey.apps.rekey_sweep.app import App
from algorekey.apps.rekey_sweep.config import AppConfig, ConfigError
from algorekey.apps.rekey_sweep.errors import WorkflowError
from algorekey.core.logging import configure_logging

__app: App | None = None


class AppNotInitialized(Exception):
    pass


def _get_app() -> App:
    if __app is None:
        raise AppNotInitialized
    return __app


def _echo_balances(title: str, balances: dict[str, AccountBalance]):
    click.echo(title)
    for name, balance in balances.items():
        click.echo(f"Account {name} balance: {balance.amount} microAlgos")


@shell(
    prompt="algorekey > ",
    intro="Algorand Rekey Sweep Shell",
)
@click.option(
    "--config-file",
    help="TOML config file. LocalNet defaults are used when not specified.",
    type=click.Path(exists=True, resolve_path=True, readable=True, path_type=Path),
)
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
def app(config_file: Path | None = None, log_level: str = "WARNING"):
    global __app

    configure_logging(level=log_level)
    try:
        config = AppConfig() if config_file is None else AppConfig.from_file(config_file)
        __app = App(config)
    except (ConfigError, WorkflowError) as err:
        raise click.ClickException(str(err)) from err


@app.command
def show_config():
    """
    Displays the application config as JSON. Secrets are not displayed.
    """
    click.echo(json.dumps(_get_app().config.to_dict(), indent=3))


@app.command
def create_accounts():
    """
    Generates new accounts A and B
    """
    account_a, account_b = _get_app().create_accounts()
    click.echo(f"Created Account A: {account_a.address}")
    click.echo(f"Created Account B: {account_b.address}")


@app.command
def balances():
    """
    Displays the ALGO balances for accounts A and B
    """
    try:
        _echo_balances("Balances:", _get_app().get_balances())
    except WorkflowError as err:
        raise click.ClickException(str(err)) from err


@app.command
def fund():
    """
    Funds accounts A and B from the dispenser account
    """
    try:
        confirmed = _get_app().fund_accounts()
    except WorkflowError as err:
        raise click.ClickException(str(err)) from err

    amount = _get_app().config.workflow.funding_amount
    click.echo(f"Successfully funded both accounts with {amount} microAlgos each")
    for txid, confirmed_round in confirmed.items():
        click.echo(f"Transaction ID: {txid} (round {confirmed_round})")


@app.command
def rekey():
    """
    Rekeys account A to account B
    """
    try:
        txid = _get_app().rekey_account()
    except WorkflowError as err:
        raise click.ClickException(str(err)) from err

    click.echo("Successfully rekeyed Account A to Account B")
    click.echo(f"Transaction ID: {txid}")


@app.command
def sweep():
    """
    Transfers account A's ALGO balance to account B. Account A must be rekeyed to account B.
    """
    try:
        result = _get_app().sweep()
    except WorkflowError as err:
        raise click.ClickException(str(err)) from err

    click.echo(
        f"Successfully transferred {result.amount} microAlgos from Account A to Account B"
    )
    click.echo(f"Transaction ID: {result.txid} (round {result.confirmed_round})")


@app.command
def run():
    """
    Runs the complete workflow: create accounts, fund, rekey and sweep
    """
    try:
        result = _get_app().run()
    except WorkflowError as err:
        raise click.ClickException(f"Error executing workflow: {err}") from err

    click.echo(f"Account A: {result.account_a}")
    click.echo(f"Account B: {result.account_b}")
    click.echo(f"Rekey Transaction ID: {result.rekey_txid}")
    click.echo(
        f"Transferred {result.sweep.amount} microAlgos from Account A to Account B"
    )
    _echo_balances("Final balances:", result.balances)


if __name__ == "__main__":
    app()
