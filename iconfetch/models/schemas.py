"""Pydantic models describing the bundles whose charm icons are resolved."""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ServiceSpec(BaseModel):
    """A single service entry of a bundle."""

    charm: str = Field(..., description="Charm reference deployed by the service, e.g. cs:trusty/mysql-1.")
    num_units: int = Field(default=0, ge=0, description="Number of units to deploy.")
    annotations: dict[str, str] = Field(
        default_factory=dict, description="Free-form annotations such as gui-x and gui-y."
    )

    @field_validator("charm")
    @classmethod
    def _reject_blank_charm(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("charm must not be empty")
        return value


class BundleData(BaseModel):
    """Services of a bundle, keyed by service name."""

    services: dict[str, ServiceSpec] = Field(default_factory=dict)

    def charm_references(self) -> list[str]:
        """Return the raw charm reference of every service, in service order.

        Services sharing a charm yield the same reference more than once; the
        resolvers take care of deduplication.
        """

        return [service.charm for service in self.services.values()]


__all__ = ["BundleData", "ServiceSpec"]
