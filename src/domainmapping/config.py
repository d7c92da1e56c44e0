#!/usr/bin/env python3

# Copyright 2024 Canonical Ltd.
# See LICENSE file for licensing details.

"""Networking configuration read from the config-network ConfigMap."""
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import DomainMapping, HTTPOption
from .utils import INGRESS_CLASS_ANNOTATION_KEY

logger = logging.getLogger(__name__)

DEFAULT_INGRESS_CLASS = "istio.ingress.networking.knative.dev"
LEGACY_INGRESS_CLASS_KEY = "ingress.class"


class ConfigValidationError(RuntimeError):
    """Raised when the networking configuration holds invalid values."""


class NetworkConfig(BaseModel):
    """NetworkConfig holds the settings used when building a DomainMapping Ingress."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ingress_class: str = Field(default=DEFAULT_INGRESS_CLASS, alias="ingress-class")
    http_protocol: HTTPOption = Field(default=HTTPOption.enabled, alias="http-protocol")

    @field_validator("ingress_class")
    @classmethod
    def validate_ingress_class(cls, value: str) -> str:
        """Reject blank ingress classes; an Ingress without a class is never picked up."""
        if not value.strip():
            raise ValueError("ingress-class must not be empty")
        return value.strip()

    @field_validator("http_protocol", mode="before")
    @classmethod
    def normalize_http_protocol(cls, value: Any) -> Any:
        """Accept the protocol regardless of case, e.g. `redirected`."""
        if isinstance(value, str):
            for option in HTTPOption:
                if option.value.lower() == value.strip().lower():
                    return option
        return value

    @property
    def http_option(self) -> HTTPOption:
        return self.http_protocol

    @classmethod
    def from_configmap(cls, data: Optional[Dict[str, str]]) -> "NetworkConfig":
        """Parse the data of the config-network ConfigMap.

        Unknown keys are ignored.  The `ingress.class` key is still honoured when
        `ingress-class` is not set.

        Raises:
            ConfigValidationError: if a known key holds an invalid value.
        """
        data = dict(data or {})
        if "ingress-class" not in data and LEGACY_INGRESS_CLASS_KEY in data:
            logger.debug(f"Using legacy {LEGACY_INGRESS_CLASS_KEY} key for the ingress class")
            data["ingress-class"] = data[LEGACY_INGRESS_CLASS_KEY]

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            logger.error(f"Invalid network configuration: {e}")
            raise ConfigValidationError(f"Invalid network configuration: {e}") from e

        logger.debug(
            f"Network configuration: ingress-class={config.ingress_class}, "
            f"http-protocol={config.http_protocol.value}"
        )
        return config


def resolve_ingress_class(config: NetworkConfig, dm: DomainMapping) -> str:
    """Return the ingress class for dm; its own annotation overrides the configured one."""
    annotations = dm.metadata.annotations or {}
    return annotations.get(INGRESS_CLASS_ANNOTATION_KEY) or config.ingress_class
