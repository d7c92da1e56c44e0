#!/usr/bin/env python3

# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""A helper module that hands built Ingresses over to the cluster through lightkube."""


import logging
from typing import Optional

from httpx import HTTPStatusError
from lightkube.core.client import Client
from lightkube.core.exceptions import ApiError
from lightkube.generic_resource import GenericNamespacedResource, create_namespaced_resource
from lightkube.models.meta_v1 import ObjectMeta

from .models import IngressResource

logger = logging.getLogger(__name__)

KINGRESS = create_namespaced_resource(
    "networking.internal.knative.dev", "v1alpha1", "Ingress", "ingresses"
)


class IngressApplyError(RuntimeError):
    """Raised when the API server rejects an Ingress."""


def to_lightkube_resource(ingress: IngressResource) -> GenericNamespacedResource:
    """Convert an IngressResource into the lightkube generic resource for KIngress."""
    data = ingress.model_dump(exclude_none=True, mode="json")
    return KINGRESS(metadata=ObjectMeta.from_dict(data["metadata"]), spec=data["spec"])


class KubernetesIngressManager:
    """Ingress Manager."""

    def __init__(self, client: Optional[Client] = None, field_manager: str = "domainmapping"):
        self.client = client or Client(field_manager=field_manager)

    def get(self, name: str, namespace: str) -> Optional[GenericNamespacedResource]:
        """Return the named Ingress, or None if it does not exist.

        Args:
            name (str): The name of the Ingress to retrieve.
            namespace (str): The namespace of the Ingress to retrieve.

        Returns:
            Optional[GenericNamespacedResource]: The Ingress if found, None otherwise.
        """
        try:
            return self.client.get(KINGRESS, name=name, namespace=namespace)
        except HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.info(f"Ingress {namespace}/{name} not found")
                return None
            logger.error(f"HTTP error getting Ingress {namespace}/{name}: {e}")
            raise

    def apply(self, ingress: IngressResource, force: bool = False) -> GenericNamespacedResource:
        """Server-side apply the Ingress.

        Args:
            ingress (IngressResource): The desired Ingress.
            force (bool): Take ownership of fields managed by another field manager.

        Returns:
            GenericNamespacedResource: The Ingress as returned by the API server.

        Raises:
            IngressApplyError: if the API server rejects the Ingress.
        """
        resource = to_lightkube_resource(ingress)
        name, namespace = ingress.metadata.name, ingress.metadata.namespace
        try:
            applied = self.client.apply(resource, force=force)
        except ApiError as e:
            logger.error(f"Failed to apply Ingress {namespace}/{name}: {e}")
            raise IngressApplyError(f"Failed to apply Ingress {namespace}/{name}") from e
        logger.debug(f"Applied Ingress {namespace}/{name}")
        return applied

    def delete(self, name: str, namespace: str) -> None:
        """Delete the named Ingress; a missing Ingress is not an error.

        Args:
            name (str): The name of the Ingress to delete.
            namespace (str): The namespace of the Ingress to delete.
        """
        try:
            self.client.delete(KINGRESS, name=name, namespace=namespace)
        except HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.info(f"Ingress {namespace}/{name} not found, skipping deletion.")
                return
            logger.error(f"HTTP error deleting Ingress {namespace}/{name}: {e}")
            raise
