#!/usr/bin/env python3
"""
Test suite for the Route53 Sync providers

This module tests the mock and boto3 backed providers, credential
resolution and the client factory with its cache.
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch

import boto3
from botocore.stub import Stubber

from route53_sync.core.exceptions import ConfigurationError, Route53ClientError
from route53_sync.core.models import Account
from route53_sync.providers.client_factory import (
    ClientCache,
    Route53ClientFactory,
    create_client_factory,
)
from route53_sync.providers.credentials import SUPPORTED_CREDENTIAL_TYPES, build_session
from route53_sync.providers.mock_provider import MockRoute53Provider
from route53_sync.providers.route53_provider import Route53Provider


class TestMockRoute53Provider(unittest.TestCase):
    """Test the mock Route 53 provider."""

    def setUp(self):
        """Set up test fixtures."""
        self.provider = MockRoute53Provider(
            {
                "zones": [
                    {
                        "id": "Z1",
                        "name": "example.com.",
                        "comment": "demo",
                        "records": [
                            {"Name": "www.example.com.", "Type": "A", "TTL": 300,
                             "ResourceRecords": [{"Value": "192.0.2.1"}]},
                        ],
                    }
                ]
            }
        )

    def test_seeded_zones(self):
        """Test zones seeded from configuration."""
        zones = self.provider.list_hosted_zones()

        self.assertEqual(len(zones), 1)
        self.assertEqual(zones[0]["Id"], "/hostedzone/Z1")
        self.assertEqual(zones[0]["Config"]["Comment"], "demo")
        self.assertEqual(zones[0]["ResourceRecordSetCount"], 1)

    def test_add_record(self):
        """Test adding a record set."""
        self.provider.add_record("/hostedzone/Z1", {"Name": "mail.example.com.", "Type": "MX"})

        records = self.provider.list_resource_record_sets("Z1")
        self.assertEqual([r["Type"] for r in records], ["A", "MX"])
        self.assertEqual(self.provider.list_hosted_zones()[0]["ResourceRecordSetCount"], 2)

    def test_invalid_input(self):
        """Test that invalid zones and records are rejected."""
        with self.assertRaises(ValueError):
            self.provider.add_zone("Z2", ".")
        with self.assertRaises(ValueError):
            self.provider.add_record("Z9", {"Name": "a.example.com.", "Type": "A"})
        with self.assertRaises(ValueError):
            self.provider.add_record("Z1", {"Name": "a.example.com.", "Type": "BOGUS"})

    def test_failures(self):
        """Test injected listing failures."""
        self.provider.fail_zone("Z1")
        with self.assertRaises(RuntimeError):
            self.provider.list_resource_record_sets("Z1")

        self.provider.fail_listing = RuntimeError("throttled")
        with self.assertRaises(RuntimeError):
            self.provider.list_hosted_zones()

    def test_listings_are_copies(self):
        """Test that callers cannot modify the provider state."""
        self.provider.list_resource_record_sets("Z1")[0]["TTL"] = 1

        self.assertEqual(self.provider.list_resource_record_sets("Z1")[0]["TTL"], 300)


class TestRoute53Provider(unittest.TestCase):
    """Test the boto3 backed provider with stubbed responses."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = boto3.client(
            "route53",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        self.stubber = Stubber(self.client)
        self.provider = Route53Provider(self.client, "test")

    def tearDown(self):
        """Clean up test fixtures."""
        self.stubber.deactivate()

    def test_list_hosted_zones_walks_pages(self):
        """Test that every page of hosted zones is read."""
        self.stubber.add_response(
            "list_hosted_zones",
            {
                "HostedZones": [
                    {"Id": "/hostedzone/Z1", "Name": "example.com.", "CallerReference": "ref-1"}
                ],
                "Marker": "",
                "IsTruncated": True,
                "NextMarker": "Z2",
                "MaxItems": "1",
            },
            {},
        )
        self.stubber.add_response(
            "list_hosted_zones",
            {
                "HostedZones": [
                    {
                        "Id": "/hostedzone/Z2",
                        "Name": "internal.example.",
                        "CallerReference": "ref-2",
                        "Config": {"PrivateZone": True},
                        "ResourceRecordSetCount": 4,
                    }
                ],
                "Marker": "Z2",
                "IsTruncated": False,
                "MaxItems": "1",
            },
            {"Marker": "Z2"},
        )

        with self.stubber:
            zones = self.provider.list_hosted_zones()

        self.assertEqual([z["Id"] for z in zones], ["/hostedzone/Z1", "/hostedzone/Z2"])
        self.assertTrue(zones[1]["Config"]["PrivateZone"])
        self.stubber.assert_no_pending_responses()

    def test_list_resource_record_sets(self):
        """Test listing the record sets of a zone."""
        self.stubber.add_response(
            "list_resource_record_sets",
            {
                "ResourceRecordSets": [
                    {"Name": "www.example.com.", "Type": "A", "TTL": 300,
                     "ResourceRecords": [{"Value": "192.0.2.1"}]},
                    {"Name": "example.com.", "Type": "NS", "TTL": 172800,
                     "ResourceRecords": [{"Value": "ns-1.awsdns-01.org."}]},
                ],
                "IsTruncated": False,
                "MaxItems": "300",
            },
            {"HostedZoneId": "Z1"},
        )

        with self.stubber:
            records = self.provider.list_resource_record_sets("Z1")

        self.assertEqual([r["Type"] for r in records], ["A", "NS"])

    def test_client_error_is_wrapped(self):
        """Test that API errors surface as Route53ClientError."""
        self.stubber.add_client_error(
            "list_hosted_zones",
            service_error_code="AccessDenied",
            service_message="User is not authorized",
            http_status_code=403,
        )

        with self.stubber, self.assertRaises(Route53ClientError) as ctx:
            self.provider.list_hosted_zones()

        self.assertIn("list hosted zones", str(ctx.exception))
        self.assertIn("AccessDenied", str(ctx.exception))


class TestCredentials(unittest.TestCase):
    """Test credential resolution."""

    def test_supported_types(self):
        """Test the supported credential kinds."""
        self.assertEqual(
            set(SUPPORTED_CREDENTIAL_TYPES),
            {"profile", "access_key", "assume_role", "web_identity", "instance_profile", "env"},
        )

    def test_access_key(self):
        """Test static access keys."""
        account = Account(
            name="test",
            default_region="eu-west-1",
            credentials_type="access_key",
            credentials_params={"access_key_id": "AKIDEXAMPLE", "secret_access_key": "secret"},
        )

        session = build_session(account)

        self.assertEqual(session.get_credentials().access_key, "AKIDEXAMPLE")
        self.assertEqual(session.region_name, "eu-west-1")

    @patch("route53_sync.providers.credentials.boto3.Session")
    def test_profile(self, session_cls):
        """Test named profiles."""
        account = Account(
            name="test", credentials_type="profile", credentials_params={"profile": "prod-admin"}
        )

        build_session(account)

        session_cls.assert_called_once_with(profile_name="prod-admin", region_name="us-east-1")

    @patch("route53_sync.providers.credentials.boto3.Session")
    def test_default_chain(self, session_cls):
        """Test instance profile and environment credentials."""
        for credentials_type in ("instance_profile", "env"):
            with self.subTest(credentials_type=credentials_type):
                build_session(Account(name="test", credentials_type=credentials_type))
                session_cls.assert_called_with(region_name="us-east-1")

    @patch("route53_sync.providers.credentials.boto3.Session")
    def test_assume_role(self, session_cls):
        """Test assuming a role through STS."""
        sts = session_cls.return_value.client.return_value
        sts.assume_role.return_value = {
            "Credentials": {
                "AccessKeyId": "ASIAEXAMPLE",
                "SecretAccessKey": "secret",
                "SessionToken": "token",
            }
        }
        account = Account(
            name="test",
            credentials_type="assume_role",
            credentials_params={
                "role_arn": "arn:aws:iam::123456789012:role/dns",
                "external_id": "ext",
                "duration_seconds": "900",
            },
        )

        build_session(account)

        sts.assume_role.assert_called_once_with(
            RoleArn="arn:aws:iam::123456789012:role/dns",
            RoleSessionName="route53-sync",
            ExternalId="ext",
            DurationSeconds=900,
        )
        session_cls.assert_called_with(
            aws_access_key_id="ASIAEXAMPLE",
            aws_secret_access_key="secret",
            aws_session_token="token",
            region_name="us-east-1",
        )

    @patch("route53_sync.providers.credentials.boto3.Session")
    def test_web_identity(self, session_cls):
        """Test web identity federation with a token file."""
        temp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, temp_dir)
        token_file = os.path.join(temp_dir, "token")
        with open(token_file, "w") as f:
            f.write("token-value\n")

        sts = session_cls.return_value.client.return_value
        sts.assume_role_with_web_identity.return_value = {
            "Credentials": {"AccessKeyId": "ASIA", "SecretAccessKey": "s", "SessionToken": "t"}
        }
        account = Account(
            name="test",
            credentials_type="web_identity",
            credentials_params={"role_arn": "arn:aws:iam::123456789012:role/dns", "token_file": token_file},
        )

        build_session(account)

        sts.assume_role_with_web_identity.assert_called_once_with(
            RoleArn="arn:aws:iam::123456789012:role/dns",
            RoleSessionName="route53-sync",
            WebIdentityToken="token-value",
        )

    def test_invalid_credentials(self):
        """Test that unusable credentials fail fast."""
        cases = [
            Account(name="test", credentials_type="kerberos"),
            Account(name="test", credentials_type="access_key", credentials_params={"access_key_id": "AKID"}),
            Account(name="test", credentials_type="profile"),
            Account(
                name="test",
                credentials_type="web_identity",
                credentials_params={"role_arn": "arn", "token_file": "/nonexistent/token"},
            ),
        ]

        for account in cases:
            with self.subTest(credentials_type=account.credentials_type):
                with self.assertRaises(ConfigurationError):
                    build_session(account)

    def test_unsupported_type_message(self):
        """Test the unsupported credentials message."""
        with self.assertRaises(ConfigurationError) as ctx:
            build_session(Account(name="test", credentials_type="kerberos"))

        self.assertEqual(str(ctx.exception), "Unsupported credentials type: kerberos")


class TestClientFactory(unittest.TestCase):
    """Test client handle creation and caching."""

    def setUp(self):
        """Set up test fixtures."""
        self.builder = Mock(side_effect=lambda account: Mock(name=account.name))
        self.prod = Account(name="prod")
        self.dev = Account(name="dev")

    def test_cache_get_or_create(self):
        """Test that the cache builds each handle once."""
        cache = ClientCache()
        builder = Mock(return_value="client")

        self.assertEqual(cache.get_or_create("a", builder), "client")
        self.assertEqual(cache.get_or_create("a", builder), "client")
        builder.assert_called_once_with()

        cache.invalidate("a")
        self.assertNotIn("a", cache)

    def test_handles_are_cached_per_account(self):
        """Test caching by account id."""
        factory = Route53ClientFactory(builder=self.builder)

        first = factory.get_or_create_client(self.prod)

        self.assertIs(factory.get_or_create_client(self.prod), first)
        self.assertIsNot(factory.get_or_create_client(self.dev), first)
        self.assertEqual(len(factory.cache), 2)
        self.assertEqual(self.builder.call_count, 2)

    def test_clear_cache(self):
        """Test clearing one or all cached handles."""
        factory = Route53ClientFactory(builder=self.builder)
        factory.get_or_create_client(self.prod)
        factory.get_or_create_client(self.dev)

        factory.clear_cache(self.prod)
        self.assertNotIn(str(self.prod.id), factory.cache)
        self.assertIn(str(self.dev.id), factory.cache)

        factory.clear_cache()
        self.assertEqual(len(factory.cache), 0)

    def test_cache_disabled(self):
        """Test that a disabled cache builds a new handle every time."""
        factory = Route53ClientFactory({"cache": False}, builder=self.builder)

        self.assertIsNot(factory.get_or_create_client(self.prod), factory.get_or_create_client(self.prod))
        self.assertEqual(len(factory.cache), 0)

    def test_shared_cache(self):
        """Test that factories sharing a cache share handles."""
        cache = ClientCache()
        first = Route53ClientFactory(cache=cache, builder=self.builder)
        second = Route53ClientFactory(cache=cache, builder=self.builder)

        self.assertIs(first.get_or_create_client(self.prod), second.get_or_create_client(self.prod))

    def test_build_route53_provider(self):
        """Test the boto3 backed handle and its client configuration."""
        account = Account(
            name="local",
            endpoint="http://localhost:4566",
            credentials_type="access_key",
            credentials_params={"access_key_id": "testing", "secret_access_key": "testing"},
        )
        factory = Route53ClientFactory({"connect_timeout": 2, "read_timeout": 10})

        provider = factory.create_client(account)

        self.assertIsInstance(provider, Route53Provider)
        self.assertEqual(provider.client.meta.endpoint_url, "http://localhost:4566")
        self.assertEqual(provider.client.meta.config.connect_timeout, 2)
        self.assertEqual(provider.client.meta.config.read_timeout, 10)

    def test_unsupported_credentials(self):
        """Test that unusable credentials fail client construction."""
        factory = Route53ClientFactory()

        with self.assertRaises(ConfigurationError):
            factory.get_or_create_client(Account(name="test", credentials_type="kerberos"))

        self.assertEqual(len(factory.cache), 0)

    def test_create_mock_factory(self):
        """Test the mock provider factory."""
        factory = create_client_factory(
            {"provider": "mock", "mock": {"zones": [{"id": "Z1", "name": "example.com."}]}}
        )

        provider = factory.get_or_create_client(self.prod)

        self.assertIsInstance(provider, MockRoute53Provider)
        self.assertIs(factory.get_or_create_client(self.dev), provider)
        self.assertEqual(len(provider.list_hosted_zones()), 1)

    def test_create_route53_factory(self):
        """Test the Route 53 factory."""
        cache = ClientCache()
        factory = create_client_factory({"provider": "route53", "client": {"max_attempts": 5}}, cache)

        self.assertIs(factory.cache, cache)
        self.assertEqual(factory.config["max_attempts"], 5)
        self.assertEqual(factory.builder, factory._build_route53_provider)

    def test_unknown_provider(self):
        """Test that an unknown provider is rejected."""
        with self.assertRaises(ConfigurationError):
            create_client_factory({"provider": "cloudflare"})


if __name__ == "__main__":
    unittest.main()
