#!/usr/bin/env python3

# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Utility functions for building resources owned by a DomainMapping.

This module contains the well-known keys, the metadata merge helpers and the
naming and ownership helpers used when deriving child resources.
"""
import hashlib
from enum import Enum
from typing import Callable, Dict, Mapping, Optional

from .models import DomainMapping, OwnerReference

# ============================================================================
# Constants
# ============================================================================
INGRESS_CLASS_ANNOTATION_KEY = "networking.knative.dev/ingress.class"
CERTIFICATE_CLASS_ANNOTATION_KEY = "networking.knative.dev/certificate.class"
CERTIFICATE_CLASS_ANNOTATION_ALT_KEY = "networking.knative.dev/certificate-class"
LAST_APPLIED_CONFIG_ANNOTATION_KEY = "kubectl.kubernetes.io/last-applied-configuration"

DOMAIN_MAPPING_UID_LABEL_KEY = "serving.knative.dev/domainMappingUID"
DOMAIN_MAPPING_NAMESPACE_LABEL_KEY = "serving.knative.dev/domainMappingNamespace"

ORIGINAL_HOST_HEADER_KEY = "K-Original-Host"

# Annotations managed by the control plane itself; never copied from the source object.
EXCLUDED_ANNOTATIONS = frozenset(
    {
        LAST_APPLIED_CONFIG_ANNOTATION_KEY,
        CERTIFICATE_CLASS_ANNOTATION_KEY,
        CERTIFICATE_CLASS_ANNOTATION_ALT_KEY,
    }
)

# Kubernetes object names are DNS labels.
MAX_NAME_LENGTH = 63
_MD5_HEX_LENGTH = 32
_NAME_HEAD_LENGTH = MAX_NAME_LENGTH - _MD5_HEX_LENGTH


# ============================================================================
# Metadata merging
# ============================================================================
class MergePrecedence(str, Enum):
    """Which side of a map union keeps its value on a key collision."""

    left = "left"
    right = "right"


def union_maps(
    left: Optional[Mapping[str, str]],
    right: Optional[Mapping[str, str]],
    prefer: MergePrecedence = MergePrecedence.right,
) -> Dict[str, str]:
    """Return the union of two string maps.

    Neither input is modified and a missing map counts as empty.

    Args:
        left: The first map.
        right: The second map.
        prefer: The side whose value is kept when both maps hold the same key.

    Returns:
        A new dictionary holding the keys of both maps.
    """
    if prefer is MergePrecedence.right:
        return {**(left or {}), **(right or {})}
    return {**(right or {}), **(left or {})}


def filter_map(
    data: Optional[Mapping[str, str]], exclude: Callable[[str], bool]
) -> Dict[str, str]:
    """Return a copy of data without the keys for which exclude(key) is true."""
    return {key: value for key, value in (data or {}).items() if not exclude(key)}


# ============================================================================
# Naming and ownership
# ============================================================================
def child_name(parent: str, suffix: str) -> str:
    """Derive a deterministic resource name from a parent name and a suffix.

    The result always fits in a Kubernetes object name (63 characters).  Names that
    would be too long are truncated and completed with an md5 hash of the parent, so
    two long parents sharing a prefix still get distinct children.  When the suffix
    itself is too long to leave room for the hash, the hash covers parent and suffix
    and the remaining room is filled with the start of the suffix.
    """
    if len(parent) + len(suffix) <= MAX_NAME_LENGTH:
        return parent + suffix

    if _NAME_HEAD_LENGTH - len(suffix) > 0:
        digest = hashlib.md5(parent.encode()).hexdigest()
        return parent[: _NAME_HEAD_LENGTH - len(suffix)] + digest + suffix

    digest = hashlib.md5((parent + suffix).encode()).hexdigest()
    name = parent[:_NAME_HEAD_LENGTH] + digest
    if (room := MAX_NAME_LENGTH - len(name)) > 0:
        name += suffix[:room]
    # Truncation may leave a dangling separator.
    return name.rstrip("-")


def make_controller_ref(owner: DomainMapping) -> OwnerReference:
    """Return an owner reference marking owner as the managing controller.

    Kubernetes garbage-collects the dependent once the owner is deleted.
    """
    return OwnerReference(
        apiVersion=owner.apiVersion,
        kind=owner.kind,
        name=owner.name,
        uid=owner.uid,
        controller=True,
        blockOwnerDeletion=True,
    )
