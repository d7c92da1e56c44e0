#!/usr/bin/env python3

# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Build the Knative Ingress that serves a DomainMapping."""
from typing import List, Optional, Sequence

from .acme import make_acme_ingress_paths
from .models import (
    DomainMapping,
    HTTP01Challenge,
    HTTPIngressPath,
    HTTPIngressRuleValue,
    HTTPOption,
    IngressBackendSplit,
    IngressResource,
    IngressResourceSpec,
    IngressRule,
    IngressTLS,
    IngressVisibility,
    Metadata,
)
from .utils import (
    DOMAIN_MAPPING_NAMESPACE_LABEL_KEY,
    DOMAIN_MAPPING_UID_LABEL_KEY,
    EXCLUDED_ANNOTATIONS,
    INGRESS_CLASS_ANNOTATION_KEY,
    ORIGINAL_HOST_HEADER_KEY,
    MergePrecedence,
    child_name,
    filter_map,
    make_controller_ref,
    union_maps,
)

BACKEND_SERVICE_PORT = 80


def make_ingress(
    dm: DomainMapping,
    backend_service_name: str,
    host_name: str,
    ingress_class: str,
    http_option: HTTPOption,
    tls: Optional[List[IngressTLS]],
    acme_challenges: Sequence[HTTP01Challenge] = (),
) -> IngressResource:
    """Create the Ingress for a DomainMapping.

    The Ingress lives in the namespace of the DomainMapping, as does the backend
    service it routes to.  Requests are forwarded with their Host rewritten to
    host_name and the requested hostname kept in the K-Original-Host header.

    Annotations and labels merge with opposite precedence.  Annotations set on the
    DomainMapping override the ingress class annotation, so a mapping may pick its
    own ingress class.  Labels are used to select and own the Ingress, so the
    system labels override anything the user set.

    Args:
        dm: The DomainMapping to route.
        backend_service_name: Service in the DomainMapping namespace to send traffic to.
        host_name: Host the requests are rewritten to.
        ingress_class: Ingress class annotation value.
        http_option: How plain HTTP is handled.
        tls: TLS configuration, passed through unchanged.
        acme_challenges: Pending HTTP-01 challenges to route ahead of the backend.

    Returns:
        IngressResource: the desired Ingress.
    """
    paths, hosts = make_acme_ingress_paths(acme_challenges, {dm.name})

    annotations = filter_map(
        union_maps(
            {INGRESS_CLASS_ANNOTATION_KEY: ingress_class},
            dm.metadata.annotations,
            prefer=MergePrecedence.right,
        ),
        EXCLUDED_ANNOTATIONS.__contains__,
    )
    labels = union_maps(
        dm.metadata.labels,
        {
            DOMAIN_MAPPING_UID_LABEL_KEY: dm.uid,
            DOMAIN_MAPPING_NAMESPACE_LABEL_KEY: dm.namespace,
        },
        prefer=MergePrecedence.right,
    )

    default_path = HTTPIngressPath(
        rewriteHost=host_name,
        splits=[
            IngressBackendSplit(
                serviceNamespace=dm.namespace,
                serviceName=backend_service_name,
                servicePort=BACKEND_SERVICE_PORT,
                percent=100,
                appendHeaders={ORIGINAL_HOST_HEADER_KEY: dm.name},
            )
        ],
    )

    return IngressResource(
        metadata=Metadata(
            name=child_name(dm.name, ""),
            namespace=dm.namespace,
            annotations=annotations,
            labels=labels,
            ownerReferences=[make_controller_ref(dm)],
        ),
        spec=IngressResourceSpec(
            httpOption=http_option,
            tls=tls,
            rules=[
                IngressRule(
                    hosts=[*hosts, dm.name],
                    visibility=IngressVisibility.external_ip,
                    # Challenge paths must be matched before the catch-all backend path.
                    http=HTTPIngressRuleValue(paths=[*paths, default_path]),
                )
            ],
        ),
    )
