"""Shared fixtures for the panda_layout test suite."""

from __future__ import annotations

import pytest

from panda_layout.model import (
    AccountViewModel,
    Context,
    Disclosures,
    Greeting,
    Module,
    Snapshot,
    Wallet,
)


def wallet(account_id: int, name: str = "") -> Wallet:
    """Build a wallet module for ``account_id``."""
    return Wallet(AccountViewModel(account_id, name=name))


def parse_modules(text: str) -> list[Module]:
    """Turn ``"greeting, wallet 456, disclosures"`` into module values."""
    modules: list[Module] = []
    for token in (part.strip() for part in text.split(",")):
        match token.split():
            case ["greeting"]:
                modules.append(Greeting())
            case ["snapshot"]:
                modules.append(Snapshot())
            case ["disclosures"]:
                modules.append(Disclosures())
            case ["wallet", account_id]:
                modules.append(wallet(int(account_id)))
            case _:
                msg = f"Unrecognised module token {token!r}"
                raise ValueError(msg)
    return modules


@pytest.fixture
def regular() -> Context:
    return Context.regular()


@pytest.fixture
def compact() -> Context:
    return Context.compact()


@pytest.fixture
def dashboard_modules() -> list[Module]:
    """Greeting, two wallets, and disclosures in feed order."""
    return [Greeting(), wallet(456), wallet(1), Disclosures()]
