#!/usr/bin/env python3

# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.
"""This module defines Pydantic schemas for the DomainMapping and Knative Ingress resources."""
from enum import Enum
from typing import Dict, List, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict


# Global metadata schema
class OwnerReference(BaseModel):
    """OwnerReference links a dependent resource to the object that owns it."""

    model_config = ConfigDict(frozen=True)

    apiVersion: str  # noqa: N815
    kind: str
    name: str
    uid: str
    controller: Optional[bool] = None
    blockOwnerDeletion: Optional[bool] = None  # noqa: N815


class Metadata(BaseModel):
    """Global metadata schema for Kubernetes resources."""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    uid: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    ownerReferences: Optional[List[OwnerReference]] = None  # noqa: N815


# DomainMapping schema
class DomainMapping(BaseModel):
    """DomainMapping is the request to route an external hostname to a backend.

    The metadata name is the hostname itself.
    """

    model_config = ConfigDict(frozen=True)

    apiVersion: str = "serving.knative.dev/v1beta1"  # noqa: N815
    kind: str = "DomainMapping"
    metadata: Metadata

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def uid(self) -> str:
        return self.metadata.uid or ""


# ACME schema
class HTTP01Challenge(BaseModel):
    """HTTP01Challenge describes a pending ACME challenge and the solver service answering it."""

    model_config = ConfigDict(frozen=True)

    url: str
    serviceName: str  # noqa: N815
    serviceNamespace: str  # noqa: N815
    servicePort: Union[int, str]  # noqa: N815

    @property
    def host(self) -> str:
        """Host (with port, if any) the challenge is served on."""
        return urlparse(self.url).netloc

    @property
    def path(self) -> str:
        return urlparse(self.url).path


# Ingress schema
class HTTPOption(str, Enum):
    """HTTPOption controls how plain HTTP traffic is handled by the ingress."""

    enabled = "Enabled"
    redirected = "Redirected"


class IngressVisibility(str, Enum):
    """IngressVisibility defines where the ingress is reachable from."""

    external_ip = "ExternalIP"
    cluster_local = "ClusterLocal"


class IngressTLS(BaseModel):
    """IngressTLS defines the certificate secret to terminate TLS with for a set of hosts."""

    model_config = ConfigDict(frozen=True)

    hosts: List[str]
    secretName: str  # noqa: N815
    secretNamespace: str  # noqa: N815


class IngressBackendSplit(BaseModel):
    """IngressBackendSplit sends a percentage of traffic to a backend service."""

    model_config = ConfigDict(frozen=True)

    serviceNamespace: str  # noqa: N815
    serviceName: str  # noqa: N815
    servicePort: Union[int, str]  # noqa: N815
    percent: int
    appendHeaders: Optional[Dict[str, str]] = None  # noqa: N815


class HTTPIngressPath(BaseModel):
    """HTTPIngressPath defines a path and the backends traffic matching it is split across."""

    model_config = ConfigDict(frozen=True)

    splits: List[IngressBackendSplit]
    path: Optional[str] = None
    rewriteHost: Optional[str] = None  # noqa: N815


class HTTPIngressRuleValue(BaseModel):
    """HTTPIngressRuleValue holds the paths of a rule, evaluated in order."""

    model_config = ConfigDict(frozen=True)

    paths: List[HTTPIngressPath]


class IngressRule(BaseModel):
    """IngressRule defines the routing rule configuration."""

    model_config = ConfigDict(frozen=True)

    hosts: List[str]
    visibility: IngressVisibility
    http: HTTPIngressRuleValue


class IngressResourceSpec(BaseModel):
    """IngressResourceSpec defines the specification of a Knative Ingress resource."""

    model_config = ConfigDict(frozen=True)

    httpOption: HTTPOption  # noqa: N815
    rules: List[IngressRule]
    tls: Optional[List[IngressTLS]] = None


class IngressResource(BaseModel):
    """IngressResource defines the structure of a Knative Ingress Kubernetes resource."""

    model_config = ConfigDict(frozen=True)

    apiVersion: str = "networking.internal.knative.dev/v1alpha1"  # noqa: N815
    kind: str = "Ingress"
    metadata: Metadata
    spec: IngressResourceSpec
