import pytest

from crmdml.exceptions import NotFoundError, ValidationError
from crmdml.models import Account, Contact, Lead


def test_insert_assigns_prefixed_ids(provider):
    account, lead = Account(name="Acme"), Lead(last_name="Boxer", company="Acme")

    provider.insert([account, lead])

    assert account.salesforce_id.startswith("001")
    assert lead.salesforce_id.startswith("00Q")
    assert len(account.salesforce_id) == 18


def test_insert_is_all_or_nothing(provider):
    good, bad = Account(name="Acme"), Account(description="no name")

    with pytest.raises(ValidationError) as excinfo:
        provider.insert([good, bad])

    assert excinfo.value.errors[0]["statusCode"] == "REQUIRED_FIELD_MISSING"
    assert good.salesforce_id is None
    assert provider.query(Account) == []


def test_insert_rejects_records_with_an_id(provider):
    account = provider.insert([Account(name="Acme")])[0]

    with pytest.raises(ValidationError):
        provider.insert([account])


def test_insert_rejects_unknown_account_reference(provider):
    with pytest.raises(ValidationError) as excinfo:
        provider.insert([Contact(last_name="Doe", account_id="001999999999999999")])

    assert excinfo.value.errors[0]["statusCode"] == "INVALID_CROSS_REFERENCE_KEY"


def test_update_merges_set_fields(provider):
    account = provider.insert([Account(name="Acme", industry="Energy")])[0]

    provider.update([Account(salesforce_id=account.salesforce_id, description="updated")])

    (stored,) = provider.query(Account, salesforce_id=account.salesforce_id)
    assert stored.industry == "Energy"
    assert stored.description == "updated"


def test_update_requires_known_ids(provider):
    with pytest.raises(ValidationError):
        provider.update([Account(name="Acme")])

    with pytest.raises(NotFoundError):
        provider.update([Account(salesforce_id="001999999999999999", name="Acme")])


def test_delete_then_update_raises_not_found(provider):
    lead = provider.insert([Lead(last_name="Boxer", company="Acme")])[0]

    provider.delete([lead])

    with pytest.raises(NotFoundError) as excinfo:
        provider.update([lead])
    assert excinfo.value.errors[0]["statusCode"] == "ENTITY_IS_DELETED"


def test_upsert_splits_on_id(provider):
    existing = provider.insert([Account(name="Old")])[0]
    existing.description = "changed"
    fresh = Account(name="New")

    provider.upsert([existing, fresh])

    assert fresh.salesforce_id is not None
    assert {a.name: a.description for a in provider.query(Account)} == {
        "Old": "changed",
        "New": None,
    }


def test_query_filters(provider):
    provider.insert([Account(name="Doe"), Account(name="Jane"), Account(name="Roe")])

    assert [a.name for a in provider.query(Account, name="Doe")] == ["Doe"]
    assert sorted(a.name for a in provider.query(Account, name={"Doe", "Jane"})) == ["Doe", "Jane"]
    assert provider.query(Account, name=[]) == []

    with pytest.raises(ValueError):
        provider.query(Account, phone="555")


def test_query_returns_copies(provider):
    provider.insert([Account(name="Acme")])

    provider.query(Account)[0].name = "Changed"

    assert provider.query(Account)[0].name == "Acme"


def test_transaction_restores_store_on_failure(provider):
    kept = provider.insert([Account(name="Kept")])[0]

    with pytest.raises(ValidationError):
        with provider.transaction():
            added = provider.insert([Account(name="Added")])[0]
            provider.delete([kept])
            provider.insert([Lead(last_name="Boxer")])

    assert [a.name for a in provider.query(Account)] == ["Kept"]
    assert added.salesforce_id is None
    provider.update([kept])


def test_nested_transaction_rolls_back_at_outermost_scope(provider):
    with pytest.raises(RuntimeError):
        with provider.transaction():
            with provider.transaction():
                provider.insert([Account(name="Inner")])
            raise RuntimeError("outer failure")

    assert provider.query(Account) == []
