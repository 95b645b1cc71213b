"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from website_deploy.state import StateStore

HOSTED_ZONES = {"example.com": "Z123", "a.com": "ZAAA", "b.com": "ZBBB"}


def make_client_error(code: str, operation: str = "TestOperation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "Mocked AWS error"}}, operation)


def list_hosted_zones_by_name(DNSName, MaxItems):
    if DNSName in HOSTED_ZONES:
        return {"HostedZones": [{"Name": f"{DNSName}.", "Id": f"/hostedzone/{HOSTED_ZONES[DNSName]}"}]}
    return {"HostedZones": []}


class FakeSession:
    """Stands in for boto3.Session, handing out one MagicMock per service."""

    def __init__(self):
        self.clients = {}
        self.resources = {}
        self.regions = []
        route53 = self.client("route53")
        route53.list_hosted_zones_by_name.side_effect = list_hosted_zones_by_name

    def client(self, service, region_name=None):
        self.regions.append((service, region_name))
        return self.clients.setdefault(service, MagicMock())

    def resource(self, service, region_name=None):
        return self.resources.setdefault(service, MagicMock())

    @property
    def s3(self):
        return self.client("s3")

    @property
    def route53(self):
        return self.client("route53")


def record_changes(route53) -> list:
    """(action, name, alias DNSName) for every change_resource_record_sets call."""
    changes = []
    for c in route53.change_resource_record_sets.call_args_list:
        for change in c.kwargs["ChangeBatch"]["Changes"]:
            record = change["ResourceRecordSet"]
            changes.append((change["Action"], record["Name"], record["AliasTarget"]["DNSName"]))
    return changes


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def site_dir(tmp_path):
    """A small built site on disk."""
    site = tmp_path / "site"
    (site / "assets").mkdir(parents=True)
    (site / "index.html").write_text("<html></html>")
    (site / "assets" / "app.1234.js").write_text("console.log(window.env)")
    return site


@pytest.fixture
def state_store(tmp_path) -> StateStore:
    (tmp_path / "state").mkdir()
    return StateStore(str(tmp_path / "state" / "website_deploy.json"))
