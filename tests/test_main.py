from unittest import mock

from crmdml.__main__ import get_provider, run
from crmdml.clients.memory import InMemoryClient
from crmdml.models import Account, Case, Lead


def test_get_provider_memory(monkeypatch):
    monkeypatch.setenv("CRMDML_PROVIDER", "memory")

    assert isinstance(get_provider(), InMemoryClient)


def test_get_provider_defaults_to_salesforce(monkeypatch):
    monkeypatch.delenv("CRMDML_PROVIDER", raising=False)

    with mock.patch("crmdml.__main__.SalesforceClient") as client:
        assert get_provider() is client.return_value


def test_run_against_memory(provider):
    results = run(provider)

    names = sorted(a.name for a in provider.query(Account))
    assert names == ["Doe", "Edge Communications", "Grand Hotels & Resorts", "Jane"]
    assert results["upserted_account"].description == "new"
    assert results["account"].active == "Yes"
    assert len(provider.query(Case)) == 3
    assert len(provider.query(Lead)) == 2
