#!/usr/bin/env python3

# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

from unittest.mock import patch

import pytest
from lightkube import Client

from domainmapping.models import DomainMapping, HTTP01Challenge, Metadata


@pytest.fixture(autouse=True)
def mock_lightkube_client():
    """Global mock for the Lightkube Client to avoid loading kubeconfig in CI."""
    with patch.object(Client, "__init__", lambda self, *args, **kwargs: None):
        yield


@pytest.fixture()
def domain_mapping():
    return DomainMapping(
        metadata=Metadata(name="a.example.com", namespace="ns", uid="u1"),
    )


@pytest.fixture()
def acme_challenges():
    return [
        HTTP01Challenge(
            url="http://b.example.com/.well-known/acme-challenge/token-b",
            serviceName="cm-acme-http-solver-b",
            serviceNamespace="ns",
            servicePort=8089,
        ),
        HTTP01Challenge(
            url="http://c.example.com/.well-known/acme-challenge/token-c",
            serviceName="cm-acme-http-solver-c",
            serviceNamespace="ns",
            servicePort=8089,
        ),
    ]
