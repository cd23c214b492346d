"""
crmdml.clients.memory
~~~~~~~~~~~~~~~~~~~~~

This module contains an in-memory persistence provider.

It follows the Salesforce contracts closely enough to stand in for the real
client in tests and dry runs: records are kept as Salesforce field dicts,
Ids carry the standard key prefixes, and batches are all-or-nothing.
"""

import copy
from itertools import count
from logging import debug, warning
from typing import Dict, List, Type

from crmdml.clients.base import PersistenceProvider
from crmdml.exceptions import NotFoundError, ValidationError
from crmdml.models import Record

KEY_PREFIXES: Dict[str, str] = {
    "Account": "001",
    "Contact": "003",
    "Opportunity": "006",
    "Lead": "00Q",
    "Case": "500",
}

# Lookup fields and the object they must point at.
REFERENCES: Dict[str, str] = {"AccountId": "Account"}


def _error(status: str, message: str, fields: list = None) -> dict:
    return {"statusCode": status, "message": message, "fields": fields or []}


class InMemoryClient(PersistenceProvider):
    """ Implement the `InMemoryClient` class.

    Records live in `store`, keyed by object name and then by Id. A transaction
    scope snapshots the store and restores it when the scope fails.
    """

    def __init__(self):
        self.store: Dict[str, Dict[str, dict]] = {name: {} for name in KEY_PREFIXES}
        self.deleted: set = set()

        self._counter = count(1)
        self._snapshot: tuple = None
        self._journal: list = []
        self._depth: int = 0

    def _new_id(self, sobject: str) -> str:
        return f"{KEY_PREFIXES[sobject]}{next(self._counter):015d}"

    def _check_required(self, sobject: str, fields: dict, required: tuple) -> None:
        missing: list = [name for name in required if fields.get(name) in (None, "")]
        if missing:
            raise ValidationError(
                f"{sobject} REQUIRED_FIELD_MISSING: {', '.join(missing)}",
                [_error("REQUIRED_FIELD_MISSING", "Required fields are missing", missing)],
            )

    def _check_references(self, sobject: str, fields: dict) -> None:
        for name, target in REFERENCES.items():
            value = fields.get(name)
            if value and value not in self.store[target]:
                raise ValidationError(
                    f"{sobject} INVALID_CROSS_REFERENCE_KEY: {name} {value}",
                    [_error("INVALID_CROSS_REFERENCE_KEY", "invalid cross reference id", [name])],
                )

    def _check_known(self, record: Record) -> None:
        if not record.salesforce_id:
            raise ValidationError(
                f"{record.sobject} MISSING_ARGUMENT: Id not specified",
                [_error("MISSING_ARGUMENT", "Id not specified", ["Id"])],
            )

        if record.salesforce_id not in self.store[record.sobject]:
            status: str = (
                "ENTITY_IS_DELETED" if record.salesforce_id in self.deleted else "INVALID_ID_FIELD"
            )
            raise NotFoundError(
                f"{record.sobject} {status}: {record.salesforce_id}",
                [_error(status, "entity is deleted or does not exist", ["Id"])],
            )

    def insert(self, records: List[Record]) -> List[Record]:
        for record in records:
            if record.salesforce_id:
                raise ValidationError(
                    f"{record.sobject} INVALID_FIELD_FOR_INSERT_UPDATE: {record.salesforce_id}",
                    [_error("INVALID_FIELD_FOR_INSERT_UPDATE", "cannot specify Id in an insert call", ["Id"])],
                )
            fields: dict = record.to_fields()
            self._check_required(record.sobject, fields, record.REQUIRED)
            self._check_references(record.sobject, fields)

        for record in records:
            if self._depth:
                self._journal.append(record)
            record.salesforce_id = self._new_id(record.sobject)
            self.store[record.sobject][record.salesforce_id] = dict(
                record.to_fields(), Id=record.salesforce_id
            )

        debug(f"Inserted {len(records)} records.")
        return records

    def update(self, records: List[Record]) -> List[Record]:
        for record in records:
            self._check_known(record)
            merged: dict = dict(self.store[record.sobject][record.salesforce_id], **record.to_fields())
            self._check_required(record.sobject, merged, record.REQUIRED)
            self._check_references(record.sobject, merged)

        for record in records:
            self.store[record.sobject][record.salesforce_id].update(record.to_fields())

        debug(f"Updated {len(records)} records.")
        return records

    def delete(self, records: List[Record]) -> List[Record]:
        for record in records:
            self._check_known(record)

        for record in records:
            del self.store[record.sobject][record.salesforce_id]
            self.deleted.add(record.salesforce_id)

        debug(f"Deleted {len(records)} records.")
        return records

    def query(self, model: Type[Record], **filters) -> List[Record]:
        criteria: dict = {model.field_name(k): v for k, v in filters.items()}

        def matches(fields: dict) -> bool:
            for name, value in criteria.items():
                if isinstance(value, (list, tuple, set)):
                    if fields.get(name) not in value:
                        return False
                elif fields.get(name) != value:
                    return False
            return True

        return [
            model.from_record(fields)
            for fields in self.store[model.sobject].values()
            if matches(fields)
        ]

    def _begin(self) -> None:
        self._snapshot = (copy.deepcopy(self.store), set(self.deleted))
        self._journal = []

    def _rollback(self) -> None:
        warning("Transaction failed; restoring the in-memory store.")
        self.store, self.deleted = self._snapshot

        # Inserted models lose the Ids the store no longer holds.
        for record in self._journal:
            record.salesforce_id = None
        self._journal = []
