"""Tests for the website-deploy command line."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_client_error
from website_deploy.build import BuildError
from website_deploy.cli import build_parser, main, parse_env
from website_deploy.domain import UnsupportedRegion
from website_deploy.state import StateStore


class TestParseEnv:
    def test_plain_strings(self):
        assert parse_env(["API=https://x"]) == {"API": "https://x"}

    def test_json_values_keep_type(self):
        assert parse_env(["DEBUG=true", "N=3", 'L=["a"]']) == {"DEBUG": True, "N": 3, "L": ["a"]}

    def test_value_may_contain_equals(self):
        assert parse_env(["Q=a=b"]) == {"Q": "a=b"}

    def test_missing_separator(self):
        with pytest.raises(ValueError, match="KEY=VALUE"):
            parse_env(["NOPE"])

    def test_none(self):
        assert parse_env(None) == {}


class TestMain:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.dir == "."
        assert args.region is None
        assert not args.remove

    def test_deploy_passes_inputs(self, tmp_path, capsys):
        with patch("website_deploy.cli.boto3.Session") as mock_session, \
                patch("website_deploy.cli.WebsiteDeployer") as mock_deployer:
            mock_deployer.return_value.deploy.return_value = {"url": "http://x", "env": {}}
            main(["--dir", str(tmp_path), "--src", "dist", "--domain", "example.com",
                  "--env", "API=https://x", "--profile", "prod"])

        mock_session.assert_called_once_with(profile_name="prod", region_name="us-east-1")
        raw = mock_deployer.return_value.deploy.call_args.args[0]
        assert raw["code"] == {"root": str(tmp_path), "src": "dist", "hook": None}
        assert raw["domain"] == "example.com"
        assert raw["env"] == {"API": "https://x"}
        assert '"url": "http://x"' in capsys.readouterr().out

    def test_build_error_exits_with_message(self, tmp_path):
        with patch("website_deploy.cli.boto3.Session"), \
                patch("website_deploy.cli.WebsiteDeployer") as mock_deployer:
            mock_deployer.return_value.deploy.side_effect = BuildError("make", "boom")
            with pytest.raises(SystemExit) as exc_info:
                main(["--dir", str(tmp_path)])
        assert "boom" in str(exc_info.value.code)

    def test_aws_error_exits(self, tmp_path):
        with patch("website_deploy.cli.boto3.Session"), \
                patch("website_deploy.cli.WebsiteDeployer") as mock_deployer:
            mock_deployer.return_value.deploy.side_effect = make_client_error("AccessDenied")
            with pytest.raises(SystemExit) as exc_info:
                main(["--dir", str(tmp_path)])
        assert "AccessDenied" in str(exc_info.value.code)

    def test_missing_dir(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["--dir", str(tmp_path / "nope")])
        assert "not found" in str(exc_info.value.code)

    def test_remove_with_nothing_tracked(self, tmp_path):
        with patch("website_deploy.cli.boto3.Session"):
            with pytest.raises(SystemExit) as exc_info:
                main(["--dir", str(tmp_path), "--remove", "--yes"])
        assert "Nothing to remove" in str(exc_info.value.code)

    def test_remove_asks_for_confirmation(self, tmp_path):
        StateStore.for_project(str(tmp_path)).save({"bucket_name": "x", "domain": "example.com", "region": "us-east-1"})
        with patch("website_deploy.cli.boto3.Session"), \
                patch("website_deploy.cli.WebsiteDeployer") as mock_deployer, \
                patch("builtins.input", return_value="n"):
            with pytest.raises(SystemExit, match="Aborted"):
                main(["--dir", str(tmp_path), "--remove"])
        mock_deployer.return_value.remove.assert_not_called()

    def test_remove_with_yes(self, tmp_path):
        StateStore.for_project(str(tmp_path)).save({"bucket_name": "x", "region": "us-east-1"})
        deployer = MagicMock()
        with patch("website_deploy.cli.boto3.Session"), \
                patch("website_deploy.cli.WebsiteDeployer", return_value=deployer):
            main(["--dir", str(tmp_path), "--remove", "--yes"])
        deployer.remove.assert_called_once_with()

    def test_unsupported_region_exits(self, tmp_path):
        with patch("website_deploy.cli.boto3.Session"), \
                patch("website_deploy.cli.WebsiteDeployer") as mock_deployer:
            mock_deployer.return_value.deploy.side_effect = UnsupportedRegion("No S3 website hosted zone known for region eu-south-1")
            with pytest.raises(SystemExit) as exc_info:
                main(["--dir", str(tmp_path), "--domain", "example.com", "--region", "eu-south-1"])
        assert "eu-south-1" in str(exc_info.value.code)

    def test_debug_only_affects_own_logger(self, tmp_path):
        logger = logging.getLogger("website_deploy")
        try:
            with patch("website_deploy.cli.boto3.Session"), \
                    patch("website_deploy.cli.WebsiteDeployer") as mock_deployer:
                mock_deployer.return_value.deploy.return_value = {"url": "http://x", "env": {}}
                main(["--dir", str(tmp_path), "--debug"])
            assert logger.level == logging.DEBUG
            assert not logging.getLogger("botocore").isEnabledFor(logging.DEBUG)
        finally:
            logger.setLevel(logging.NOTSET)
