"""
crmdml.main
~~~~~~~~~~~

This module implements the system's main script.
"""

import os
from logging import getLogger, info, INFO

from crmdml import exercises
from crmdml.clients.base import PersistenceProvider
from crmdml.clients.memory import InMemoryClient
from crmdml.clients.salesforce import SalesforceClient
from crmdml.models import Contact


def get_provider() -> PersistenceProvider:
    """ Build the provider named by `CRMDML_PROVIDER` (`salesforce` by default). """
    if os.getenv("CRMDML_PROVIDER", "salesforce").lower() == "memory":
        return InMemoryClient()

    return SalesforceClient()


def run(provider: PersistenceProvider = None) -> dict:
    """ Run every exercise in order.

    :param provider: A `PersistenceProvider`; built from the environment if omitted.
    :return: A `dict` of what each step produced.
    """
    provider = provider or get_provider()
    info(f"Running exercises against {type(provider).__name__}.")

    account = exercises.create_account(provider, "Edge Communications", "Electronics")
    contacts = exercises.create_contacts(provider, account, ["Rogers", "Forbes"])
    exercises.update_account_description(provider, account, "Updated by crmdml.")

    opportunity = exercises.create_opportunity(provider, account, "Edge Emergency Generator", 75000)
    exercises.update_opportunity_stage(provider, [opportunity], "Qualification")

    leads = exercises.create_leads(provider, ["Boxer", "Young"], "Burlington Textiles")
    cases = exercises.create_cases(provider, account, 3)
    accounts = exercises.upsert_active_accounts(provider, [account])

    upserted = exercises.upsert_account_by_name(provider, "Grand Hotels & Resorts")
    linked = exercises.upsert_accounts_for_contacts(
        provider, [Contact(last_name="Doe"), Contact(last_name="Jane"), Contact(last_name="Doe")]
    )

    deleted_leads = exercises.create_and_delete_leads(provider, ["Temp"], "Dickenson plc")
    deleted_cases = exercises.create_and_delete_cases(provider, account, 2)
    info("All exercises complete.")

    return {
        "account": account,
        "contacts": contacts,
        "opportunity": opportunity,
        "leads": leads,
        "cases": cases,
        "active_accounts": accounts,
        "upserted_account": upserted,
        "linked_contacts": linked,
        "deleted_leads": deleted_leads,
        "deleted_cases": deleted_cases,
    }


if __name__ == "__main__":
    getLogger().setLevel(INFO)

    run()
