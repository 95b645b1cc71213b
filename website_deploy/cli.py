"""Command line entry point: website-deploy."""

import argparse
import json
import logging
import os
import sys

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from website_deploy.build import BuildError
from website_deploy.deployer import DEFAULT_REGION, WebsiteDeployer
from website_deploy.domain import HostedZoneNotFound, UnsupportedRegion, www
from website_deploy.state import StateStore


def parse_env(pairs) -> dict:
    """Turn KEY=VALUE pairs into a dict. Values that parse as JSON keep their type."""
    env = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid --env value {pair!r}, expected KEY=VALUE")
        try:
            env[key] = json.loads(value)
        except ValueError:
            env[key] = value
    return env


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="website-deploy",
        description="Deploy a static website to an S3 bucket configured for website hosting, optionally serving it under a Route53-managed custom domain with a www redirect.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""examples:
  %(prog)s --dir ./site
      Upload ./site to a new public S3 website bucket.

  %(prog)s --dir . --src dist --hook "npm run build" --domain example.com
      Build, upload dist/, create a www.example.com redirect bucket and
      point example.com and www.example.com at the site.

  %(prog)s --dir . --env API_URL=https://api.example.com
      Also write env.js exposing window.env.API_URL to the site.

  %(prog)s --dir . --remove
      Tear down everything recorded in the state file.

state tracking:
  The bucket, domain and region are recorded in website_deploy.json in the
  project directory. Later deploys reuse the same bucket and remove DNS
  records for a domain that is no longer requested.""",
    )
    parser.add_argument("--dir", default=".", help="Project root (default: current directory). The build hook runs here and env.js is written here.")
    parser.add_argument("--src", help="Directory to upload, relative to --dir (default: --dir itself).")
    parser.add_argument("--hook", help='Shell command that builds the site before upload, e.g. "npm run build".')
    parser.add_argument("--region", default=None, help=f"AWS region for the buckets (default: {DEFAULT_REGION}).")
    parser.add_argument("--domain", help="Custom domain (e.g. example.com). The Route53 hosted zone must already exist.")
    parser.add_argument("--env", action="append", metavar="KEY=VALUE", help="Expose KEY to the site as window.env.KEY. Repeatable.")
    parser.add_argument("--profile", help="AWS credentials profile to use.")
    parser.add_argument("--state-file", help="Path to the state file (default: <dir>/website_deploy.json).")
    parser.add_argument("--remove", action="store_true", help="Remove the buckets and DNS records tracked in the state file.")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation before --remove.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def confirm_remove(state: dict) -> bool:
    print("The following resources will be destroyed:")
    print(f"  - S3 bucket: {state['bucket_name']} (all objects will be deleted)")
    if state.get("domain"):
        print(f"  - Route53 alias records: {state['domain']}, {www(state['domain'])}")
        print(f"  - S3 redirect bucket: {www(state['domain'])}")
    answer = input("\nAre you sure you want to destroy all resources? This cannot be undone. [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    if args.debug:
        logging.getLogger("website_deploy").setLevel(logging.DEBUG)

    project_dir = os.path.abspath(args.dir)
    if not os.path.isdir(project_dir):
        sys.exit(f"Project directory not found: {project_dir}")

    try:
        env = parse_env(args.env)
    except ValueError as e:
        parser.error(str(e))

    state_store = StateStore(args.state_file) if args.state_file else StateStore.for_project(project_dir)
    session = boto3.Session(profile_name=args.profile, region_name=args.region or DEFAULT_REGION)
    deployer = WebsiteDeployer(session, state_store)

    try:
        if args.remove:
            state = state_store.load()
            if not state.get("bucket_name"):
                sys.exit("Nothing to remove: no resources tracked in state file.")
            if not args.yes and not confirm_remove(state):
                sys.exit("Aborted.")
            deployer.remove()
            print("All resources removed.")
            return

        outputs = deployer.deploy({
            "code": {"root": project_dir, "src": args.src, "hook": args.hook},
            "region": args.region,
            "domain": args.domain,
            "env": env,
        })
    except BuildError as e:
        sys.exit(str(e))
    except (HostedZoneNotFound, UnsupportedRegion) as e:
        sys.exit(str(e))
    except (ClientError, BotoCoreError) as e:
        sys.exit(f"AWS error: {e}")

    print(json.dumps(outputs, indent=2))
    print("Done!")


if __name__ == "__main__":
    main()
