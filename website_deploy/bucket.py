"""S3 buckets serving a static website or redirecting to one."""

import json
import logging
import mimetypes
from pathlib import Path
from typing import Iterable

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# Regions whose website endpoint uses a dash before the region name
# (s3-website-us-east-1); every newer region uses a dot.
DASH_WEBSITE_REGIONS = {
    "us-east-1",
    "us-west-1",
    "us-west-2",
    "ap-southeast-1",
    "ap-southeast-2",
    "ap-northeast-1",
    "eu-west-1",
    "sa-east-1",
    "us-gov-west-1",
}


def website_endpoint(region: str) -> str:
    if region in DASH_WEBSITE_REGIONS:
        return f"s3-website-{region}.amazonaws.com"
    return f"s3-website.{region}.amazonaws.com"


def website_url(bucket_name: str, region: str) -> str:
    return f"http://{bucket_name}.{website_endpoint(region)}"


class BucketProvisioner:
    """One S3 bucket, either holding the site or redirecting to it."""

    def __init__(self, session, name: str, region: str):
        self.name = name
        self.region = region
        self.s3 = session.client("s3", region_name=region)
        self.resource = session.resource("s3", region_name=region)

    @property
    def url(self) -> str:
        return website_url(self.name, self.region)

    def ensure(self) -> bool:
        """Create the bucket if it doesn't exist. Returns True if it was just created."""
        try:
            self.s3.head_bucket(Bucket=self.name)
            logger.debug(f"Bucket {self.name} already exists.")
            return False
        except ClientError:
            pass

        logger.info(f"Creating bucket {self.name} in {self.region}...")
        params = {"Bucket": self.name}
        if self.region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        self.s3.create_bucket(**params)
        return True

    def configure_hosting(self):
        """Make the bucket publicly readable and serve it as a single-page site."""
        self.s3.put_public_access_block(
            Bucket=self.name,
            PublicAccessBlockConfiguration={
                "BlockPublicAcls": False,
                "IgnorePublicAcls": False,
                "BlockPublicPolicy": False,
                "RestrictPublicBuckets": False,
            },
        )

        policy = {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Sid": "PublicReadGetObject",
                    "Effect": "Allow",
                    "Principal": "*",
                    "Action": "s3:GetObject",
                    "Resource": f"arn:aws:s3:::{self.name}/*",
                }
            ],
        }
        self.s3.put_bucket_policy(Bucket=self.name, Policy=json.dumps(policy))

        self.s3.put_bucket_cors(
            Bucket=self.name,
            CORSConfiguration={
                "CORSRules": [
                    {
                        "AllowedHeaders": ["*"],
                        "AllowedMethods": ["GET"],
                        "AllowedOrigins": ["*"],
                    }
                ]
            },
        )

        # Unknown paths fall back to index.html so client-side routing works
        self.s3.put_bucket_website(
            Bucket=self.name,
            WebsiteConfiguration={
                "IndexDocument": {"Suffix": "index.html"},
                "ErrorDocument": {"Key": "index.html"},
            },
        )

    def configure_redirect(self, target_domain: str):
        self.s3.put_bucket_website(
            Bucket=self.name,
            WebsiteConfiguration={"RedirectAllRequestsTo": {"HostName": target_domain}},
        )

    def upload(self, directory: str, exclude: Iterable[str] = ()) -> int:
        """Upload every file under directory, keyed by its relative path.

        exclude holds keys (paths relative to directory) that are skipped.
        """
        root = Path(directory)
        excluded = set(exclude)
        files = sorted(
            f for f in root.rglob("*") if f.is_file() and f.relative_to(root).as_posix() not in excluded
        )
        logger.info(f"Uploading {len(files)} files to s3://{self.name}/...")

        for file_path in files:
            key = file_path.relative_to(root).as_posix()
            content_type, _ = mimetypes.guess_type(str(file_path))
            if content_type is None:
                content_type = "application/octet-stream"

            extra_args = {"ContentType": content_type}
            if file_path.suffix == ".html":
                extra_args["CacheControl"] = "no-cache"
            elif key.startswith("assets/") or "/assets/" in key:
                extra_args["CacheControl"] = "public, max-age=31536000, immutable"

            self.s3.upload_file(str(file_path), self.name, key, ExtraArgs=extra_args)

        return len(files)

    def remove(self) -> bool:
        """Empty and delete the bucket. Returns False if it was already gone."""
        bucket = self.resource.Bucket(self.name)
        try:
            bucket.object_versions.all().delete()
            bucket.objects.all().delete()
            bucket.delete()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "NoSuchBucket":
                logger.warning(f"Bucket {self.name} does not exist, nothing to remove.")
                return False
            raise
        logger.info(f"Deleted bucket {self.name}.")
        return True
