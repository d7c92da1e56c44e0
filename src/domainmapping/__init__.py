# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Build the Knative Ingress that routes a DomainMapping to its backend."""

from .ingress import make_ingress

__all__ = ["make_ingress"]
