from unittest import mock

import pytest

from crmdml.clients.memory import InMemoryClient
from crmdml.clients.salesforce import SalesforceClient


@pytest.fixture
def provider():
    return InMemoryClient()


@pytest.fixture
def api():
    """ A stand-in for `simple_salesforce.Salesforce` that accepts every write. """
    api = mock.MagicMock()

    def restful(path, params=None, method="GET", **kwargs):
        if method == "DELETE":
            ids = params["ids"].split(",")
            return [{"id": i, "success": True, "errors": []} for i in ids]

        records = kwargs["json"]["records"]
        return [
            {"id": record.get("Id") or f"001{n:015d}", "success": True, "errors": []}
            for n, record in enumerate(records)
        ]

    api.restful.side_effect = restful
    api.query_all.return_value = {"totalSize": 0, "done": True, "records": []}
    return api


@pytest.fixture
def salesforce(api):
    return SalesforceClient(api=api)
