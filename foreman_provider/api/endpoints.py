"""Foreman API endpoints, relative to `ForemanConfig.api_url`."""

from __future__ import annotations

from enum import Enum
from urllib.parse import quote


def _quote(value: str | int) -> str:
    # Quote everything, including "/", so a value can't escape its segment
    return quote(str(value), safe="")


class Endpoint(str, Enum):
    """API endpoints.

    Members containing `{}` placeholders are templates and must be
    filled in with `with_params`.
    """

    Hosts = "hosts"
    HostPower = "hosts/{}/power"
    HostBoot = "hosts/{}/boot"

    Hostgroups = "hostgroups"
    OperatingSystems = "operatingsystems"
    Organizations = "organizations"
    Locations = "locations"
    CommonParameters = "common_parameters"

    def __str__(self) -> str:
        if "{}" in self.value:
            raise ValueError(f"Endpoint {self.name} is a template, use `with_params`.")
        return self.value

    def with_id(self, identity: str | int) -> str:
        """Path of a single entity in this collection."""
        return f"{self}/{_quote(identity)}"

    def with_params(self, *params: str | int) -> str:
        """Fill in the placeholders of a template endpoint.

        :raises ValueError: If the number of params doesn't match the placeholders.
        """
        expected = self.value.count("{}")
        if len(params) != expected:
            raise ValueError(f"{self.name} takes {expected} parameter(s), got {len(params)}.")
        return self.value.format(*map(_quote, params))
