#!/usr/bin/env python3

# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Routing for pending ACME HTTP-01 challenges."""
from typing import AbstractSet, List, Sequence, Tuple

from .models import HTTP01Challenge, HTTPIngressPath, IngressBackendSplit


def make_acme_ingress_paths(
    challenges: Sequence[HTTP01Challenge], domains: AbstractSet[str]
) -> Tuple[List[HTTPIngressPath], List[str]]:
    """Build the ingress paths that route each challenge to its solver.

    Args:
        challenges: The pending challenges, in the order they should be routed.
        domains: Hosts already served by the ingress; their challenges add no host.

    Returns:
        The challenge paths and the extra hosts they need, both in challenge order.
    """
    paths: List[HTTPIngressPath] = []
    extra_hosts: List[str] = []

    for challenge in challenges:
        if challenge.host not in domains:
            extra_hosts.append(challenge.host)

        paths.append(
            HTTPIngressPath(
                path=challenge.path,
                splits=[
                    IngressBackendSplit(
                        serviceNamespace=challenge.serviceNamespace,
                        serviceName=challenge.serviceName,
                        servicePort=challenge.servicePort,
                        percent=100,
                    )
                ],
            )
        )

    return paths, extra_hosts
