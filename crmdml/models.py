"""
crmdml.models
~~~~~~~~~~~~~

This module implements data models.

Each model parallels a Salesforce object. The `FIELDS` mapping pairs model
attributes with their Salesforce field names and drives conversion in both
directions.
"""

from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Dict, Optional, Tuple


@dataclass
class Record:
    """ Model the fields every Salesforce record shares. """

    sobject: ClassVar[str] = ""
    FIELDS: ClassVar[Dict[str, str]] = {}
    REQUIRED: ClassVar[Tuple[str, ...]] = ()

    salesforce_id: Optional[str] = None

    @classmethod
    def field_name(cls, attribute: str) -> str:
        """ Map a model attribute to its Salesforce field name.

        :param attribute: A `str` attribute name, e.g. `last_name`.
        :return: The `str` Salesforce field name, e.g. `LastName`.
        """
        if attribute == "salesforce_id":
            return "Id"

        try:
            return cls.FIELDS[attribute]
        except KeyError:
            raise ValueError(f"{cls.sobject} has no attribute '{attribute}'.")

    def to_fields(self) -> dict:
        """ Produce a Salesforce field dict, leaving out unset values and the Id. """
        fields: dict = {}
        for attribute, name in self.FIELDS.items():
            value = getattr(self, attribute)
            if value is None:
                continue
            if isinstance(value, date):
                value = value.isoformat()
            fields[name] = value

        return fields

    @classmethod
    def from_record(cls, record: dict) -> "Record":
        """ Build a model from a Salesforce record `dict`.

        :param record: A record as returned by a SOQL query.
        """
        values: dict = {"salesforce_id": record.get("Id")}
        for attribute, name in cls.FIELDS.items():
            values[attribute] = record.get(name)

        return cls(**values)


@dataclass
class Account(Record):
    """ Model an `Account` object that parallels some Salesforce fields. """

    sobject: ClassVar[str] = "Account"
    FIELDS: ClassVar[Dict[str, str]] = {
        "name": "Name",
        "industry": "Industry",
        "description": "Description",
        "active": "Active__c",
    }
    REQUIRED: ClassVar[Tuple[str, ...]] = ("Name",)

    name: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    active: Optional[str] = None


@dataclass
class Contact(Record):
    """ Model a `Contact` object that parallels some Salesforce fields. """

    sobject: ClassVar[str] = "Contact"
    FIELDS: ClassVar[Dict[str, str]] = {
        "first_name": "FirstName",
        "last_name": "LastName",
        "account_id": "AccountId",
    }
    REQUIRED: ClassVar[Tuple[str, ...]] = ("LastName",)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    account_id: Optional[str] = None


@dataclass
class Opportunity(Record):
    """ Model an `Opportunity` object that parallels some Salesforce fields. """

    sobject: ClassVar[str] = "Opportunity"
    FIELDS: ClassVar[Dict[str, str]] = {
        "name": "Name",
        "stage": "StageName",
        "close_date": "CloseDate",
        "amount": "Amount",
        "account_id": "AccountId",
    }
    REQUIRED: ClassVar[Tuple[str, ...]] = ("Name", "StageName", "CloseDate")

    name: Optional[str] = None
    stage: Optional[str] = None
    close_date: Optional[date] = None
    amount: Optional[float] = None
    account_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: dict) -> "Opportunity":
        opportunity: Opportunity = super().from_record(record)
        if isinstance(opportunity.close_date, str):
            opportunity.close_date = date.fromisoformat(opportunity.close_date)

        return opportunity


@dataclass
class Lead(Record):
    """ Model a `Lead` object that parallels some Salesforce fields. """

    sobject: ClassVar[str] = "Lead"
    FIELDS: ClassVar[Dict[str, str]] = {
        "last_name": "LastName",
        "company": "Company",
    }
    REQUIRED: ClassVar[Tuple[str, ...]] = ("LastName", "Company")

    last_name: Optional[str] = None
    company: Optional[str] = None


@dataclass
class Case(Record):
    """ Model a `Case` object that parallels some Salesforce fields. """

    sobject: ClassVar[str] = "Case"
    FIELDS: ClassVar[Dict[str, str]] = {
        "status": "Status",
        "origin": "Origin",
        "subject": "Subject",
        "account_id": "AccountId",
    }

    status: Optional[str] = None
    origin: Optional[str] = None
    subject: Optional[str] = None
    account_id: Optional[str] = None
