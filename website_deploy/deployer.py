"""Deploy and remove workflows for a static website stack."""

import logging
import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from website_deploy.bucket import BucketProvisioner
from website_deploy.build import BuildRunner, run_hook, write_env_bundle
from website_deploy.domain import DomainBinder, check_region, www
from website_deploy.state import StateStore
from website_deploy.status import StatusReporter

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"


@dataclass
class WebsiteInputs:
    root: str
    bucket_name: str
    region: str = DEFAULT_REGION
    src: Optional[str] = None
    hook: Optional[str] = None
    domain: Optional[str] = None
    env: dict = field(default_factory=dict)

    @property
    def upload_dir(self) -> str:
        return self.src or self.root


def generate_bucket_name() -> str:
    return f"website-{uuid.uuid4().hex[:8]}"


def resolve_inputs(raw: dict, state: dict) -> WebsiteInputs:
    """Fill in defaults for a raw inputs mapping.

    raw follows the shape {"code": {"root", "src", "hook"}, "region",
    "domain", "env"}; every key is optional. A bucket name already recorded
    in state always wins so repeated deploys keep using the same bucket.
    """
    code = raw.get("code") or {}
    root = os.path.abspath(code["root"]) if code.get("root") else os.getcwd()
    src = os.path.join(root, code["src"]) if code.get("src") else None
    domain = raw.get("domain") or None

    return WebsiteInputs(
        root=root,
        src=src,
        hook=code.get("hook") or None,
        region=raw.get("region") or DEFAULT_REGION,
        domain=domain,
        bucket_name=state.get("bucket_name") or domain or generate_bucket_name(),
        env=dict(raw.get("env") or {}),
    )


class WebsiteDeployer:
    def __init__(self, session, state_store: StateStore, runner: BuildRunner = None, reporter: StatusReporter = None):
        self.session = session
        self.state_store = state_store
        self.runner = runner or BuildRunner()
        self.reporter = reporter or StatusReporter()

    def deploy(self, raw_inputs: dict = None) -> dict:
        self.reporter.status("Deploying")
        state = self.state_store.load()
        inputs = resolve_inputs(raw_inputs or {}, state)
        if inputs.domain:
            check_region(inputs.region)

        self.reporter.status("Preparing AWS S3 Bucket")
        self.reporter.debug(f"Deploying website bucket in {inputs.region}.")
        website_bucket = BucketProvisioner(self.session, inputs.bucket_name, inputs.region)
        website_bucket.ensure()

        self.reporter.debug(f"Configuring bucket {inputs.bucket_name} for website hosting.")
        website_bucket.configure_hosting()

        previous_domain = state.get("domain")
        if previous_domain and previous_domain != inputs.domain:
            previous_region = state.get("region") or DEFAULT_REGION
            self.reporter.debug(f"Domain {previous_domain} is no longer configured. Removing its records.")
            DomainBinder(self.session).unbind_all(previous_domain, previous_region)
            if www(previous_domain) != inputs.bucket_name:
                self.reporter.debug(f"Removing redirect bucket {www(previous_domain)}.")
                BucketProvisioner(self.session, www(previous_domain), previous_region).remove()

        if inputs.domain:
            self.reporter.debug(f"Domain specified. Deploying redirect bucket {www(inputs.domain)}.")
            redirect_bucket = BucketProvisioner(self.session, www(inputs.domain), inputs.region)
            redirect_bucket.ensure()
            redirect_bucket.configure_redirect(inputs.domain)

            self.reporter.debug(f"Setting domain {inputs.domain} for bucket.")
            DomainBinder(self.session).bind_all(inputs.domain, inputs.region)

        if inputs.env:
            self.reporter.status("Bundling environment variables")
            write_env_bundle(inputs.env, inputs.root)

        if inputs.hook:
            self.reporter.status("Building assets")
            run_hook(self.runner, inputs.hook, inputs.root)

        self.reporter.status("Uploading")
        self.reporter.debug(f"Uploading website files from {inputs.upload_dir} to bucket {inputs.bucket_name}.")
        website_bucket.upload(inputs.upload_dir, exclude=self._state_file_in(inputs.upload_dir))

        state = {
            "bucket_name": inputs.bucket_name,
            "domain": inputs.domain,
            "region": inputs.region,
            "url": website_bucket.url,
        }
        self.state_store.save(state)
        self.reporter.debug(f"Website deployed successfully to URL: {state['url']}.")

        outputs = {"url": state["url"], "env": inputs.env}
        if inputs.domain:
            outputs["domain"] = f"http://{inputs.domain}"
        return outputs

    def _state_file_in(self, directory: str) -> list:
        """The state file as a key under directory, if it lives there."""
        relative = os.path.relpath(self.state_store.path, os.path.abspath(directory))
        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            return []
        return [Path(relative).as_posix()]

    def remove(self) -> dict:
        self.reporter.status("Removing")
        state = self.state_store.load()
        region = state.get("region") or DEFAULT_REGION

        if state.get("bucket_name"):
            self.reporter.debug("Removing website bucket.")
            BucketProvisioner(self.session, state["bucket_name"], region).remove()

        domain = state.get("domain")
        if domain:
            self.reporter.debug(f"Domain was specified. Removing domain {domain}.")
            DomainBinder(self.session).unbind_all(domain, region)

            self.reporter.debug("Removing redirect bucket.")
            BucketProvisioner(self.session, www(domain), region).remove()

        self.state_store.clear()
        return {}
