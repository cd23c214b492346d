"""
crmdml.clients.salesforce
~~~~~~~~~~~~~~~~~~~~~~~~~

This module contains a high-level Salesforce API client class.
"""

import os
from logging import debug, warning
from typing import Callable, List, Type

import requests as rq
import simple_salesforce as ss

from crmdml.clients.base import PersistenceProvider
from crmdml.exceptions import NotFoundError, PersistenceError, ValidationError
from crmdml.models import Record

# sObject Collections accept at most 200 records per request.
CHUNK_SIZE = 200

COLLECTIONS = "composite/sobjects"

ROLLBACK_CODES = ("ALL_OR_NONE_OPERATION_ROLLED_BACK", "PROCESSING_HALTED")
NOT_FOUND_CODES = (
    "ENTITY_IS_DELETED",
    "INVALID_CROSS_REFERENCE_KEY",
    "INVALID_ID_FIELD",
    "MALFORMED_ID",
    "NOT_FOUND",
)


def _transport_errors(exc: ss.SalesforceError) -> list:
    """ Normalize the error body of a failed HTTP call. """
    content = exc.content if isinstance(exc.content, list) else []
    return [
        {
            "statusCode": item.get("errorCode", ""),
            "message": item.get("message", ""),
            "fields": item.get("fields", []),
        }
        for item in content
        if isinstance(item, dict)
    ]


class SalesforceClient(PersistenceProvider):
    """ Implement the `SalesforceClient` class.

    This class contains a high-level controlled interface for persisting
    records through the Salesforce REST API.

    Unless passed in, the username, password, token, organization ID and login
    domain are read from the environment variables `SF_USERNAME`, `SF_PASSWORD`,
    `SF_TOKEN`, `SF_ORG_ID` and `SF_DOMAIN` respectively. `SF_DOMAIN` defaults
    to `login`; use `test` for a sandbox.

    Every batch write is sent with `allOrNone` set, so a single bad record
    rejects its whole request.
    """

    def __init__(
        self,
        api: ss.Salesforce = None,
        username: str = None,
        password: str = None,
        token: str = None,
        organization: str = None,
        domain: str = None,
    ):
        self.api: ss.Salesforce = api or ss.Salesforce(
            username=username or os.getenv("SF_USERNAME"),
            password=password or os.getenv("SF_PASSWORD"),
            security_token=token or os.getenv("SF_TOKEN"),
            organizationId=organization or os.getenv("SF_ORG_ID"),
            domain=domain or os.getenv("SF_DOMAIN", "login"),
            session=rq.Session(),
        )

        self._depth: int = 0
        self._inserted: list = []
        self._untracked: int = 0

    def _send(self, method: str, payload: list, on_chunk: Callable = None) -> list:
        """ Send a payload to the sObject Collections endpoint in chunks.

        Each chunk is its own all-or-nothing request, so earlier chunks stay
        written when a later one fails. `on_chunk` is called with the offset
        and results of every chunk as soon as it succeeds.

        :param method: `POST`, `PATCH` or `DELETE`.
        :param payload: A `list` of record `dict` objects, or of Ids for `DELETE`.
        :param on_chunk: An optional callable taking `(start, results)`.
        :return: A `list` of per-record result `dict` objects.
        """
        results: list = []
        for start in range(0, len(payload), CHUNK_SIZE):
            chunk: list = payload[start : start + CHUNK_SIZE]
            debug(f"{method} {len(chunk)} records to {COLLECTIONS}.")

            try:
                if method == "DELETE":
                    response = self.api.restful(
                        COLLECTIONS,
                        params={"ids": ",".join(chunk), "allOrNone": "true"},
                        method=method,
                    )
                else:
                    response = self.api.restful(
                        COLLECTIONS,
                        method=method,
                        json={"allOrNone": True, "records": chunk},
                    )
            except ss.SalesforceResourceNotFound as e:
                raise NotFoundError(f"Resource not found: {e.url}", _transport_errors(e))
            except ss.SalesforceMalformedRequest as e:
                raise ValidationError(f"Malformed request: {e.url}", _transport_errors(e))

            self._raise_for_results(response or [])
            results.extend(response or [])
            if on_chunk:
                on_chunk(start, response or [])

        return results

    def _raise_for_results(self, results: list) -> None:
        """ Raise the error behind the first failed record of a response. """
        errors: list = [e for r in results if not r.get("success") for e in r.get("errors", [])]
        if not errors:
            return

        causes: list = [e for e in errors if e.get("statusCode") not in ROLLBACK_CODES] or errors
        status: str = causes[0].get("statusCode", "")
        message: str = f"{status}: {causes[0].get('message', '')}"

        if status in NOT_FOUND_CODES:
            raise NotFoundError(message, causes)
        raise ValidationError(message, causes)

    def _require_ids(self, records: List[Record]) -> None:
        for record in records:
            if not record.salesforce_id:
                raise ValidationError(
                    f"{record.sobject} MISSING_ARGUMENT: Id not specified",
                    [{"statusCode": "MISSING_ARGUMENT", "message": "Id not specified", "fields": ["Id"]}],
                )

    def insert(self, records: List[Record]) -> List[Record]:
        for record in records:
            if record.salesforce_id:
                raise ValidationError(
                    f"{record.sobject} INVALID_FIELD_FOR_INSERT_UPDATE: {record.salesforce_id}",
                    [
                        {
                            "statusCode": "INVALID_FIELD_FOR_INSERT_UPDATE",
                            "message": "cannot specify Id in an insert call",
                            "fields": ["Id"],
                        }
                    ],
                )

        payload: list = [
            dict(record.to_fields(), attributes={"type": record.sobject}) for record in records
        ]

        def assign(start: int, results: list) -> None:
            for record, result in zip(records[start:], results):
                record.salesforce_id = result["id"]
                if self._depth:
                    self._inserted.append(record)

        self._send("POST", payload, on_chunk=assign)

        return records

    def update(self, records: List[Record]) -> List[Record]:
        self._require_ids(records)

        payload: list = [
            dict(record.to_fields(), Id=record.salesforce_id, attributes={"type": record.sobject})
            for record in records
        ]
        self._send("PATCH", payload)

        if self._depth:
            self._untracked += len(records)

        return records

    def delete(self, records: List[Record]) -> List[Record]:
        self._require_ids(records)

        self._send("DELETE", [record.salesforce_id for record in records])

        for record in records:
            tracked: bool = any(r is record for r in self._inserted)
            if tracked:
                self._inserted = [r for r in self._inserted if r is not record]
            elif self._depth:
                self._untracked += 1

        return records

    def query(self, model: Type[Record], **filters) -> List[Record]:
        clauses: list = []
        values: dict = {}
        for i, (attribute, value) in enumerate(filters.items()):
            name: str = model.field_name(attribute)
            key: str = f"v{i}"

            if isinstance(value, (list, tuple, set)):
                if not value:
                    return []
                clauses.append(f"{name} IN {{{key}}}")
                values[key] = list(value)
            else:
                clauses.append(f"{name} = {{{key}}}")
                values[key] = value

        columns: str = ", ".join(["Id", *model.FIELDS.values()])
        sql: str = f"SELECT {columns} FROM {model.sobject}"
        if clauses:
            sql = " ".join([sql, "WHERE", " AND ".join(clauses)])

        records: list = self.api.query_all(ss.format_soql(sql, **values))["records"]

        return [model.from_record(record) for record in records]

    def _begin(self) -> None:
        self._inserted = []
        self._untracked = 0

    def _rollback(self) -> None:
        """ Delete what the failed scope inserted.

        The REST API cannot revert updates or deletes; those are left in place.
        A failing compensation is logged so the scope's own error still surfaces.
        """
        inserted: list = [r for r in self._inserted if r.salesforce_id]
        try:
            if inserted:
                warning(f"Transaction failed; deleting {len(inserted)} inserted records.")
                try:
                    self._send("DELETE", [record.salesforce_id for record in inserted])
                except (PersistenceError, ss.SalesforceError) as e:
                    warning(f"Compensating delete failed. {e}")
                else:
                    for record in inserted:
                        record.salesforce_id = None

            if self._untracked:
                warning(f"Transaction failed; {self._untracked} updated or deleted records were not reverted.")
        finally:
            self._inserted = []
            self._untracked = 0
