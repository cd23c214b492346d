"""
crmdml.clients.base
~~~~~~~~~~~~~~~~~~~

This module contains the interface every persistence provider implements.

Exercises only ever talk to a `PersistenceProvider`, so the Salesforce client
and the in-memory client are interchangeable.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Type

from crmdml.models import Record


class PersistenceProvider(ABC):
    """ Implement the `PersistenceProvider` interface.

    Batch calls are all-or-nothing: when any record in a batch fails, none of
    the batch is written and a `PersistenceError` subclass is raised.
    """

    @abstractmethod
    def insert(self, records: List[Record]) -> List[Record]:
        """ Insert new records and assign their `salesforce_id`.

        :param records: A `list` of models without an Id.
        :return: The same `list`, with Ids assigned.
        """

    @abstractmethod
    def update(self, records: List[Record]) -> List[Record]:
        """ Write the set fields of already persisted records.

        :param records: A `list` of models carrying a known Id.
        """

    @abstractmethod
    def delete(self, records: List[Record]) -> List[Record]:
        """ Remove persisted records. Their `salesforce_id` is left in place.

        :param records: A `list` of models carrying a known Id.
        """

    @abstractmethod
    def query(self, model: Type[Record], **filters) -> List[Record]:
        """ Find records of a model type matching every filter.

        A `list`, `tuple` or `set` filter value matches any of its members.
        Text comparison follows the provider; Salesforce compares
        case-insensitively, the in-memory client exactly.

        :param model: A `Record` subclass, e.g. `Account`.
        :param filters: Attribute name to required value.
        :return: A `list` of fresh model instances.
        """

    def upsert(self, records: List[Record]) -> List[Record]:
        """ Insert records without an Id and update those with one.

        :param records: A `list` of models.
        """
        with self.transaction():
            self.update([r for r in records if r.salesforce_id])
            self.insert([r for r in records if not r.salesforce_id])

        return records

    @contextmanager
    def transaction(self) -> Iterator["PersistenceProvider"]:
        """ Scope a unit of work; writes are undone if the scope raises.

        Scopes nest; only the outermost one undoes anything.
        """
        depth: int = getattr(self, "_depth", 0)
        self._depth = depth + 1
        if depth == 0:
            self._begin()
        try:
            yield self
        except BaseException:
            if depth == 0:
                self._rollback()
            raise
        finally:
            self._depth = depth

    def _begin(self) -> None:
        """ Start tracking writes for the outermost transaction scope. """

    def _rollback(self) -> None:
        """ Undo the writes tracked since `_begin`. """
