from datetime import date

import pytest

from crmdml.models import Account, Case, Contact, Opportunity


def test_to_fields_skips_unset_values_and_id():
    account = Account(salesforce_id="001000000000000001", name="Acme", industry="Energy")

    assert account.to_fields() == {"Name": "Acme", "Industry": "Energy"}


def test_to_fields_serializes_dates():
    opportunity = Opportunity(name="Deal", stage="Prospecting", close_date=date(2026, 1, 31))

    assert opportunity.to_fields()["CloseDate"] == "2026-01-31"


def test_from_record_ignores_attributes_and_unknown_fields():
    record = {
        "attributes": {"type": "Contact", "url": "/services/data/v59.0/sobjects/Contact/003"},
        "Id": "003000000000000001",
        "LastName": "Doe",
        "AccountId": "001000000000000001",
        "Email": "doe@example.com",
    }

    contact = Contact.from_record(record)

    assert contact == Contact(
        salesforce_id="003000000000000001",
        last_name="Doe",
        account_id="001000000000000001",
    )


def test_opportunity_from_record_parses_close_date():
    opportunity = Opportunity.from_record({"Id": "006", "Name": "Deal", "CloseDate": "2026-03-01"})

    assert opportunity.close_date == date(2026, 3, 1)


def test_field_name():
    assert Case.field_name("subject") == "Subject"
    assert Case.field_name("salesforce_id") == "Id"

    with pytest.raises(ValueError):
        Case.field_name("priority")
