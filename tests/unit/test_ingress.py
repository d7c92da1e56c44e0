# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

import pytest

from domainmapping.ingress import make_ingress
from domainmapping.models import (
    DomainMapping,
    HTTPOption,
    IngressTLS,
    IngressVisibility,
    Metadata,
)
from domainmapping.utils import (
    CERTIFICATE_CLASS_ANNOTATION_KEY,
    DOMAIN_MAPPING_NAMESPACE_LABEL_KEY,
    DOMAIN_MAPPING_UID_LABEL_KEY,
    INGRESS_CLASS_ANNOTATION_KEY,
    LAST_APPLIED_CONFIG_ANNOTATION_KEY,
    child_name,
)

TARGET_HOST = "svc.ns.svc.cluster.local"


def build(dm, *challenges, tls=None):
    return make_ingress(
        dm,
        "svc",
        TARGET_HOST,
        "net-certmanager",
        HTTPOption.enabled,
        tls,
        acme_challenges=challenges,
    )


def test_make_ingress_without_challenges(domain_mapping):
    ingress = build(domain_mapping)

    assert ingress.apiVersion == "networking.internal.knative.dev/v1alpha1"
    assert ingress.kind == "Ingress"
    assert ingress.metadata.name == child_name("a.example.com", "")
    assert ingress.metadata.namespace == "ns"
    assert ingress.metadata.annotations == {INGRESS_CLASS_ANNOTATION_KEY: "net-certmanager"}
    assert ingress.metadata.labels == {
        DOMAIN_MAPPING_UID_LABEL_KEY: "u1",
        DOMAIN_MAPPING_NAMESPACE_LABEL_KEY: "ns",
    }

    assert ingress.spec.httpOption == HTTPOption.enabled
    assert ingress.spec.tls is None
    assert len(ingress.spec.rules) == 1
    rule = ingress.spec.rules[0]
    assert rule.hosts == ["a.example.com"]
    assert rule.visibility == IngressVisibility.external_ip

    assert len(rule.http.paths) == 1
    path = rule.http.paths[0]
    assert path.rewriteHost == TARGET_HOST
    assert path.path is None
    assert len(path.splits) == 1
    split = path.splits[0]
    assert split.percent == 100
    assert split.serviceName == "svc"
    assert split.serviceNamespace == "ns"
    assert split.servicePort == 80
    assert split.appendHeaders == {"K-Original-Host": "a.example.com"}


def test_make_ingress_owner_reference(domain_mapping):
    ingress = build(domain_mapping)

    owner_refs = ingress.metadata.ownerReferences
    assert len(owner_refs) == 1
    assert [ref.controller for ref in owner_refs].count(True) == 1
    assert owner_refs[0].kind == "DomainMapping"
    assert owner_refs[0].name == "a.example.com"
    assert owner_refs[0].uid == "u1"


def test_make_ingress_routes_challenges_first(domain_mapping, acme_challenges):
    ingress = build(domain_mapping, *acme_challenges)

    rule = ingress.spec.rules[0]
    assert rule.hosts == ["b.example.com", "c.example.com", "a.example.com"]
    assert len(rule.http.paths) == 3
    assert [p.path for p in rule.http.paths[:2]] == [
        "/.well-known/acme-challenge/token-b",
        "/.well-known/acme-challenge/token-c",
    ]
    assert [p.splits[0].serviceName for p in rule.http.paths[:2]] == [
        "cm-acme-http-solver-b",
        "cm-acme-http-solver-c",
    ]
    assert rule.http.paths[-1].rewriteHost == TARGET_HOST
    assert rule.http.paths[-1].splits[0].serviceName == "svc"


def test_make_ingress_is_idempotent(domain_mapping, acme_challenges):
    first = build(domain_mapping, *acme_challenges)
    second = build(domain_mapping, *acme_challenges)

    assert first == second
    assert first.model_dump() == second.model_dump()


def test_make_ingress_passes_tls_and_http_option_through(domain_mapping):
    tls = [
        IngressTLS(hosts=["a.example.com"], secretName="a.example.com", secretNamespace="ns")
    ]

    ingress = make_ingress(
        domain_mapping, "svc", TARGET_HOST, "istio", HTTPOption.redirected, tls
    )

    assert ingress.spec.tls == tls
    assert ingress.spec.httpOption == HTTPOption.redirected
    assert ingress.metadata.annotations[INGRESS_CLASS_ANNOTATION_KEY] == "istio"


def test_make_ingress_user_annotations_override_ingress_class():
    dm = DomainMapping(
        metadata=Metadata(
            name="a.example.com",
            namespace="ns",
            uid="u1",
            annotations={
                INGRESS_CLASS_ANNOTATION_KEY: "user-class",
                "example.com/note": "hello",
            },
        )
    )

    ingress = build(dm)

    assert ingress.metadata.annotations == {
        INGRESS_CLASS_ANNOTATION_KEY: "user-class",
        "example.com/note": "hello",
    }


@pytest.mark.parametrize(
    "key", [LAST_APPLIED_CONFIG_ANNOTATION_KEY, CERTIFICATE_CLASS_ANNOTATION_KEY]
)
def test_make_ingress_drops_excluded_annotations(key):
    dm = DomainMapping(
        metadata=Metadata(
            name="a.example.com", namespace="ns", uid="u1", annotations={key: "value"}
        )
    )

    ingress = build(dm)

    assert key not in ingress.metadata.annotations
    assert ingress.metadata.annotations[INGRESS_CLASS_ANNOTATION_KEY] == "net-certmanager"


def test_make_ingress_system_labels_win():
    dm = DomainMapping(
        metadata=Metadata(
            name="a.example.com",
            namespace="ns",
            uid="u1",
            labels={
                DOMAIN_MAPPING_UID_LABEL_KEY: "spoofed",
                DOMAIN_MAPPING_NAMESPACE_LABEL_KEY: "other",
                "app": "web",
            },
        )
    )

    ingress = build(dm)

    assert ingress.metadata.labels == {
        DOMAIN_MAPPING_UID_LABEL_KEY: "u1",
        DOMAIN_MAPPING_NAMESPACE_LABEL_KEY: "ns",
        "app": "web",
    }


def test_make_ingress_does_not_modify_domain_mapping():
    annotations = {"example.com/note": "hello"}
    labels = {"app": "web"}
    dm = DomainMapping(
        metadata=Metadata(
            name="a.example.com", namespace="ns", uid="u1", annotations=annotations, labels=labels
        )
    )

    build(dm)

    assert dm.metadata.annotations == {"example.com/note": "hello"}
    assert dm.metadata.labels == {"app": "web"}


def test_make_ingress_long_hostname_gets_hashed_name():
    name = "a-very-long-subdomain-name-that-keeps-going." * 2 + "example.com"
    dm = DomainMapping(metadata=Metadata(name=name, namespace="ns", uid="u1"))

    ingress = build(dm)

    assert ingress.metadata.name == child_name(name, "")
    assert len(ingress.metadata.name) == 63
    assert ingress.spec.rules[0].hosts == [name]


def test_make_ingress_serializes_to_wire_format(domain_mapping):
    data = build(domain_mapping).model_dump(exclude_none=True, mode="json")

    assert data["spec"]["httpOption"] == "Enabled"
    rule = data["spec"]["rules"][0]
    assert rule["visibility"] == "ExternalIP"
    assert rule["http"]["paths"] == [
        {
            "rewriteHost": TARGET_HOST,
            "splits": [
                {
                    "serviceNamespace": "ns",
                    "serviceName": "svc",
                    "servicePort": 80,
                    "percent": 100,
                    "appendHeaders": {"K-Original-Host": "a.example.com"},
                }
            ],
        }
    ]
    assert "tls" not in data["spec"]
