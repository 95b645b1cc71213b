"""Deploy a static website to S3, optionally under a Route53-managed domain."""

from website_deploy.build import BuildError
from website_deploy.deployer import WebsiteDeployer, WebsiteInputs, resolve_inputs
from website_deploy.domain import HostedZoneNotFound, UnsupportedRegion
from website_deploy.state import StateStore

__version__ = "0.1.0"

__all__ = [
    "BuildError",
    "HostedZoneNotFound",
    "UnsupportedRegion",
    "StateStore",
    "WebsiteDeployer",
    "WebsiteInputs",
    "resolve_inputs",
]
