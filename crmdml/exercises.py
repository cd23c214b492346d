"""
crmdml.exercises
~~~~~~~~~~~~~~~~

This module implements the data-manipulation exercises.

Every exercise takes a `PersistenceProvider` first and runs inside one of its
transaction scopes, so a failure part-way through leaves nothing behind.
Errors raised by the provider are never caught here.
"""

from datetime import date, timedelta
from functools import wraps
from logging import info
from typing import Dict, List

from crmdml.clients.base import PersistenceProvider
from crmdml.models import Account, Case, Contact, Lead, Opportunity


def transactional(func):
    """ Run an exercise inside its provider's transaction scope. """

    @wraps(func)
    def wrapper(provider: PersistenceProvider, *args, **kwargs):
        with provider.transaction():
            return func(provider, *args, **kwargs)

    return wrapper


@transactional
def create_account(
    provider: PersistenceProvider,
    name: str,
    industry: str = "Technology",
    description: str = None,
) -> Account:
    """ Question 1: insert a single account. """
    account = Account(name=name, industry=industry, description=description)
    provider.insert([account])

    info(f"Created account {account.name} ({account.salesforce_id}).")
    return account


@transactional
def create_contacts(
    provider: PersistenceProvider, account: Account, last_names: List[str]
) -> List[Contact]:
    """ Question 2: insert one contact per last name under a given account. """
    contacts: list = [
        Contact(last_name=last_name, account_id=account.salesforce_id)
        for last_name in last_names
    ]
    provider.insert(contacts)

    info(f"Created {len(contacts)} contacts for {account.name}.")
    return contacts


@transactional
def update_account_description(
    provider: PersistenceProvider, account: Account, description: str
) -> Account:
    """ Question 3: replace the description of a persisted account. """
    account.description = description
    provider.update([account])

    return account


@transactional
def create_opportunity(
    provider: PersistenceProvider,
    account: Account,
    name: str,
    amount: float,
    close_date: date = None,
    stage: str = "Prospecting",
) -> Opportunity:
    """ Question 4: insert an opportunity for a given account.

    :param close_date: Defaults to thirty days from today.
    """
    opportunity = Opportunity(
        name=name,
        stage=stage,
        close_date=close_date or date.today() + timedelta(days=30),
        amount=amount,
        account_id=account.salesforce_id,
    )
    provider.insert([opportunity])

    info(f"Created opportunity {opportunity.name} ({opportunity.salesforce_id}).")
    return opportunity


@transactional
def update_opportunity_stage(
    provider: PersistenceProvider, opportunities: List[Opportunity], stage: str
) -> List[Opportunity]:
    """ Question 5: move every given opportunity to a stage in one batch. """
    for opportunity in opportunities:
        opportunity.stage = stage
    provider.update(opportunities)

    return opportunities


@transactional
def create_leads(
    provider: PersistenceProvider, last_names: List[str], company: str
) -> List[Lead]:
    """ Question 6: insert one lead per last name for a given company. """
    leads: list = [Lead(last_name=last_name, company=company) for last_name in last_names]
    provider.insert(leads)

    info(f"Created {len(leads)} leads for {company}.")
    return leads


@transactional
def create_cases(
    provider: PersistenceProvider, account: Account, count: int, origin: str = "Web"
) -> List[Case]:
    """ Question 7: insert `count` cases numbered from `Case # 0`. """
    cases: list = [
        Case(status="New", origin=origin, subject=f"Case # {i}", account_id=account.salesforce_id)
        for i in range(count)
    ]
    provider.insert(cases)

    info(f"Created {len(cases)} cases for {account.name}.")
    return cases


@transactional
def upsert_active_accounts(
    provider: PersistenceProvider, accounts: List[Account], active: str = "Yes"
) -> List[Account]:
    """ Question 8: flag accounts and upsert them in one batch.

    Accounts without an Id are inserted; persisted ones are updated.
    """
    for account in accounts:
        account.active = active
    provider.upsert(accounts)

    return accounts


@transactional
def upsert_account_by_name(provider: PersistenceProvider, name: str) -> Account:
    """ Question 9: update the accounts named `name`, or create one.

    Every match gets the description `updated`. With no match a new account
    with the description `new` is created. When several accounts share the
    name, all are updated and whichever the query listed first is returned.

    Name matching follows the provider: SOQL compares text case-insensitively,
    so on Salesforce `acme` also matches `ACME`; the in-memory provider only
    matches the exact name.

    :param name: An exact account name.
    :return: The first persisted `Account`.
    """
    accounts: list = provider.query(Account, name=name)

    if accounts:
        for account in accounts:
            account.description = "updated"
    else:
        accounts = [Account(name=name, description="new")]

    provider.upsert(accounts)

    info(f"Upserted {len(accounts)} accounts named {name}.")
    return accounts[0]


@transactional
def upsert_accounts_for_contacts(
    provider: PersistenceProvider, contacts: List[Contact]
) -> List[Contact]:
    """ Question 10: link each contact to the account named after its last name.

    Missing accounts are created in one batch before any contact is linked, so
    their Ids are available. Contacts sharing a last name share an account.

    :param contacts: A `list` of `Contact` objects, persisted or not.
    :return: The `list` of linked and upserted contacts.
    """
    last_names: set = {contact.last_name for contact in contacts}

    existing: Dict[str, Account] = {
        account.name: account for account in provider.query(Account, name=last_names)
    }
    created: Dict[str, Account] = {
        last_name: Account(name=last_name)
        for last_name in last_names
        if last_name not in existing
    }
    provider.insert(list(created.values()))

    staged: list = []
    for contact in contacts:
        if contact.last_name in created:
            contact.account_id = created[contact.last_name].salesforce_id
            staged.append(contact)
        elif contact.last_name in existing:
            contact.account_id = existing[contact.last_name].salesforce_id
            staged.append(contact)

    provider.upsert(staged)

    info(
        f"Linked {len(staged)} contacts; created {len(created)} accounts, "
        f"reused {len(existing)}."
    )
    return staged


@transactional
def create_and_delete_leads(
    provider: PersistenceProvider, last_names: List[str], company: str
) -> List[Lead]:
    """ Question 11: insert leads, then delete the same records. """
    leads: list = [Lead(last_name=last_name, company=company) for last_name in last_names]
    provider.insert(leads)
    provider.delete(leads)

    return leads


@transactional
def create_and_delete_cases(
    provider: PersistenceProvider, account: Account, count: int
) -> List[Case]:
    """ Question 12: insert `count` cases, then delete them again. """
    cases: list = create_cases(provider, account, count)
    provider.delete(cases)

    info(f"Deleted {len(cases)} cases.")
    return cases
