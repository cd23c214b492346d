"""
crmdml.clients
~~~~~~~~~~~~~~

This package contains the persistence providers.
"""

from crmdml.clients.base import PersistenceProvider
from crmdml.clients.memory import InMemoryClient
from crmdml.clients.salesforce import SalesforceClient
