"""Route53 alias records pointing a domain at an S3 website endpoint."""

import logging

from botocore.exceptions import ClientError

from website_deploy.bucket import website_endpoint

logger = logging.getLogger(__name__)

# Route53 hosted zone ids of the S3 website endpoints, used as alias targets.
S3_WEBSITE_HOSTED_ZONES = {
    "us-east-1": "Z3AQBSTGFYJSTF",
    "us-east-2": "Z2O1EMRO9K5GLX",
    "us-west-1": "Z2F56UZL2M1ACD",
    "us-west-2": "Z3BJ6K6RIION7M",
    "ca-central-1": "Z1QDHH18159H29",
    "ap-south-1": "Z11RGJOFQNVJUP",
    "ap-northeast-1": "Z2M4EHUR26P7ZW",
    "ap-northeast-2": "Z3W03O7B5YMIYP",
    "ap-northeast-3": "Z2YQB5RD63NC85",
    "ap-southeast-1": "Z3O0J2DXBE1FTB",
    "ap-southeast-2": "Z1WCIGYICN2BYD",
    "eu-central-1": "Z21DNDUVLTQW6Q",
    "eu-west-1": "Z1BKCTXD74EZPE",
    "eu-west-2": "Z3GKZC51ZF0DB4",
    "eu-west-3": "Z3R1K369G5AVDG",
    "eu-north-1": "Z3BAZG2TWCNX0D",
    "sa-east-1": "Z7KQH4QJS55SO",
}


class HostedZoneNotFound(LookupError):
    pass


class UnsupportedRegion(ValueError):
    pass


def check_region(region: str):
    if region not in S3_WEBSITE_HOSTED_ZONES:
        raise UnsupportedRegion(f"No S3 website hosted zone known for region {region}")


def www(domain: str) -> str:
    return f"www.{domain}"


class DomainBinder:
    def __init__(self, session):
        self.route53 = session.client("route53")

    def find_hosted_zone(self, domain: str) -> str:
        """Find the Route53 hosted zone ID for the given domain."""
        # Walk up the domain to find a matching zone (www.example.com -> example.com)
        parts = domain.split(".")
        for i in range(len(parts) - 1):
            candidate = ".".join(parts[i:])
            resp = self.route53.list_hosted_zones_by_name(DNSName=candidate, MaxItems="1")
            for zone in resp["HostedZones"]:
                zone_name = zone["Name"].rstrip(".")
                if zone_name == candidate:
                    zone_id = zone["Id"].split("/")[-1]
                    logger.debug(f"Found hosted zone: {zone_name} ({zone_id})")
                    return zone_id
        raise HostedZoneNotFound(f"No Route53 hosted zone found for {domain}")

    def _change(self, action: str, zone_id: str, domain: str, region: str):
        check_region(region)
        self.route53.change_resource_record_sets(
            HostedZoneId=zone_id,
            ChangeBatch={
                "Changes": [
                    {
                        "Action": action,
                        "ResourceRecordSet": {
                            "Name": domain,
                            "Type": "A",
                            "AliasTarget": {
                                "HostedZoneId": S3_WEBSITE_HOSTED_ZONES[region],
                                "DNSName": website_endpoint(region),
                                "EvaluateTargetHealth": False,
                            },
                        },
                    }
                ]
            },
        )

    def bind(self, domain: str, region: str):
        zone_id = self.find_hosted_zone(domain)
        logger.info(f"Creating Route53 alias: {domain} -> {website_endpoint(region)}")
        self._change("UPSERT", zone_id, domain, region)

    def unbind(self, domain: str, region: str) -> bool:
        """Delete the alias record. Returns False if there was nothing to delete."""
        try:
            zone_id = self.find_hosted_zone(domain)
        except HostedZoneNotFound as e:
            logger.warning(f"{e}, skipping removal of {domain}.")
            return False

        logger.info(f"Deleting Route53 alias: {domain}")
        try:
            self._change("DELETE", zone_id, domain, region)
        except ClientError as e:
            # Route53 rejects deleting a record that doesn't exist
            if e.response.get("Error", {}).get("Code") == "InvalidChangeBatch":
                logger.warning(f"Alias record for {domain} not found: {e}")
                return False
            raise
        return True

    def bind_all(self, domain: str, region: str):
        self.bind(domain, region)
        self.bind(www(domain), region)

    def unbind_all(self, domain: str, region: str):
        self.unbind(domain, region)
        self.unbind(www(domain), region)
