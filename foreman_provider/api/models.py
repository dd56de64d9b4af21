"""Pydantic models for the foreman_provider package."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any, ClassVar, Self

from pydantic import AliasChoices, Field, ValidationInfo, field_validator, model_validator

from foreman_provider.api.abstracts import APIMixin, ForemanModel, ForemanObject
from foreman_provider.api.endpoints import Endpoint
from foreman_provider.api.fields import (
    ForcedBool,
    ForcedStr,
    ForeignKey,
    IdList,
    OptionalId,
)
from foreman_provider.exceptions import InputFailure, OperationFailed
from foreman_provider.utilities.api import new_request, send_with_retry

logger = logging.getLogger(__name__)


class Parameter(ForemanModel):
    """Key/value parameter attached to a host or hostgroup."""

    id: OptionalId = None  # noqa: A003
    name: str
    value: ForcedStr = ""

    omit_when_empty: ClassVar[frozenset[str]] = frozenset({"id"})


class InterfaceAttribute(ForemanModel):
    """A network interface attached to a host.

    The API never replaces the list of interfaces as a whole. New interfaces
    (without an ID) are added, existing ones are modified in place, and an
    interface is only removed when it is sent with `destroy` set.
    """

    id: OptionalId = None  # noqa: A003
    subnet_id: OptionalId = None
    identifier: ForcedStr = ""
    name: ForcedStr = ""
    username: ForcedStr = ""
    password: ForcedStr = ""
    managed: ForcedBool = False
    provision: ForcedBool = False
    virtual: ForcedBool = False
    primary: ForcedBool = False
    ip: ForcedStr = ""
    mac: ForcedStr = ""
    type: ForcedStr = ""  # noqa: A003
    provider: ForcedStr = ""
    attached_devices: ForcedStr = ""
    attached_to: ForcedStr = ""
    # Hypervisor specific settings, virtual machines only
    compute_attributes: dict[str, Any] = {}
    # Never returned by the server
    destroy: bool = Field(default=False, serialization_alias="_destroy")

    omit_when_empty: ClassVar[frozenset[str]] = frozenset(
        {
            "id",
            "subnet_id",
            "username",
            "password",
            "attached_devices",
            "attached_to",
            "compute_attributes",
            "destroy",
        }
    )

    @field_validator("compute_attributes", mode="before")
    @classmethod
    def _none_compute_attributes_as_empty_dict(cls, v: Any) -> Any:
        return v or {}


def _parameters_field(write_key: str) -> Any:
    """Parameters are returned as `parameters`, but written as `<write_key>`."""
    return Field(
        default=[],
        validation_alias=AliasChoices("parameters", write_key),
        serialization_alias=write_key,
    )


class Host(ForemanObject, APIMixin):
    """A host managed by Foreman."""

    build: ForcedBool = False
    provision_method: str = "build"
    comment: ForcedStr = ""
    # The server returns the FQDN as the name; domain_name is used to strip it.
    domain_name: ForcedStr = Field(default="", exclude=True)

    domain_id: ForeignKey = None
    environment_id: ForeignKey = None
    hostgroup_id: ForeignKey = None
    operatingsystem_id: ForeignKey = None
    medium_id: ForeignKey = None
    image_id: ForeignKey = None
    compute_resource_id: ForeignKey = None
    compute_profile_id: ForeignKey = None

    interfaces: list[InterfaceAttribute] = Field(
        default=[],
        validation_alias=AliasChoices("interfaces", "interfaces_attributes"),
        serialization_alias="interfaces_attributes",
    )
    parameters: list[Parameter] = _parameters_field("host_parameters_attributes")

    # Local state only
    enable_bmc: bool = Field(default=False, exclude=True)
    bmc_success: bool = Field(default=False, exclude=True)

    wire_key: ClassVar[str] = "host"
    omit_when_empty: ClassVar[frozenset[str]] = ForemanObject.omit_when_empty | {
        "interfaces",
        "parameters",
    }

    @classmethod
    def endpoint(cls) -> Endpoint:
        """Return the endpoint for the class."""
        return Endpoint.Hosts

    @field_validator("provision_method", mode="before")
    @classmethod
    def _default_provision_method(cls, v: Any) -> Any:
        return v or "build"

    @field_validator("interfaces", "parameters", mode="before")
    @classmethod
    def _none_as_empty_list(cls, v: Any) -> Any:
        return v or []

    @model_validator(mode="after")
    def _strip_domain_from_name(self) -> Self:
        """Strip the domain from the FQDN the server returns as the name."""
        suffix = f".{self.domain_name}"
        if self.domain_name and self.name.endswith(suffix):
            self.name = self.name[: -len(suffix)]
        return self

    def bmc_interfaces(self) -> list[InterfaceAttribute]:
        """Interfaces of type BMC."""
        return [i for i in self.interfaces if i.type.lower() == "bmc"]

    def power(self, action: PowerAction | str, retry_count: int | None = None) -> PowerResponse:
        """Send a power action to the host's BMC."""
        command = PowerCommand(power_action=PowerAction(action))
        return send_power_command(self._require_id(), command, retry_count)

    def boot(self, device: BootDevice | str, retry_count: int | None = None) -> BootResponse:
        """Set the next boot device of the host through its BMC."""
        command = BootCommand(device=BootDevice(device))
        return send_power_command(self._require_id(), command, retry_count)


class Hostgroup(ForemanObject, APIMixin):
    """A hostgroup.

    Hostgroups form a tree through `parent_id`. Hosts inherit configuration
    from their hostgroup, which in turn inherits from its parents; the
    inheritance itself is resolved by the server.
    """

    # Computed by the server: "<parent 1>/<parent 2>/.../<name>"
    title: ForcedStr = Field(default="", exclude=True)
    root_pass: ForcedStr = ""
    pxe_loader: ForcedStr = ""

    architecture_id: ForeignKey = None
    compute_profile_id: ForeignKey = None
    domain_id: ForeignKey = None
    environment_id: ForeignKey = None
    medium_id: ForeignKey = None
    operatingsystem_id: ForeignKey = None
    parent_id: ForeignKey = None
    ptable_id: ForeignKey = None
    puppet_ca_proxy_id: ForeignKey = None
    puppet_proxy_id: ForeignKey = None
    realm_id: ForeignKey = None
    subnet_id: ForeignKey = None

    parameters: list[Parameter] = _parameters_field("group_parameters_attributes")

    wire_key: ClassVar[str] = "hostgroup"
    search_field: ClassVar[str] = "title"
    omit_when_empty: ClassVar[frozenset[str]] = ForemanObject.omit_when_empty | {
        "root_pass",
        "parameters",
    }

    @classmethod
    def endpoint(cls) -> Endpoint:
        """Return the endpoint for the class."""
        return Endpoint.Hostgroups

    @field_validator("parameters", mode="before")
    @classmethod
    def _none_as_empty_list(cls, v: Any) -> Any:
        return v or []


class OSFamily(StrEnum):
    """Operating system families known to Foreman."""

    AIX = "AIX"
    Altlinux = "Altlinux"
    Archlinux = "Archlinux"
    Coreos = "Coreos"
    Debian = "Debian"
    Fcos = "Fcos"
    Freebsd = "Freebsd"
    Gentoo = "Gentoo"
    Junos = "Junos"
    NXOS = "NXOS"
    Photon = "Photon"
    Rancheros = "Rancheros"
    Redhat = "Redhat"
    Rhcos = "Rhcos"
    Solaris = "Solaris"
    Suse = "Suse"
    VRP = "VRP"
    Windows = "Windows"
    Xenserver = "Xenserver"


class PasswordHash(StrEnum):
    """Root password hash functions."""

    MD5 = "MD5"
    SHA256 = "SHA256"
    SHA512 = "SHA512"
    Base64 = "Base64"
    Base64Windows = "Base64-Windows"


class OperatingSystem(ForemanObject, APIMixin):
    """An operating system.

    The associated templates, media, architectures and partition tables are
    returned as nested objects; only their IDs are kept, and they are never
    sent back.
    """

    # Computed by the server from name, major and minor
    title: ForcedStr = Field(default="", exclude=True)
    major: ForcedStr = ""
    minor: ForcedStr = ""
    description: ForcedStr = ""
    family: OSFamily | None = None
    release_name: ForcedStr = ""
    password_hash: PasswordHash | None = None

    provisioning_template_ids: IdList = Field(
        default=[],
        validation_alias=AliasChoices("provisioning_templates", "provisioning_template_ids"),
        exclude=True,
    )
    medium_ids: IdList = Field(
        default=[],
        validation_alias=AliasChoices("media", "medium_ids"),
        exclude=True,
    )
    architecture_ids: IdList = Field(
        default=[],
        validation_alias=AliasChoices("architectures", "architecture_ids"),
        exclude=True,
    )
    ptable_ids: IdList = Field(
        default=[],
        validation_alias=AliasChoices("ptables", "ptable_ids"),
        exclude=True,
    )

    wire_key: ClassVar[str] = "operatingsystem"
    search_field: ClassVar[str] = "title"
    omit_when_empty: ClassVar[frozenset[str]] = ForemanObject.omit_when_empty | {
        "family",
        "password_hash",
    }

    @classmethod
    def endpoint(cls) -> Endpoint:
        """Return the endpoint for the class."""
        return Endpoint.OperatingSystems

    @field_validator("family", "password_hash", mode="before")
    @classmethod
    def _unknown_as_none(cls, v: Any, info: ValidationInfo) -> Any:
        """Empty values are unset. Values newer than this client are dropped with a warning."""
        if not v:
            return None
        enum = OSFamily if info.field_name == "family" else PasswordHash
        if isinstance(v, enum) or v in {member.value for member in enum}:
            return v
        logger.warning("Ignoring unknown operating system %s %r", info.field_name, v)
        return None


class Organization(ForemanObject, APIMixin):
    """An organization."""

    title: ForcedStr = Field(default="", exclude=True)
    description: ForcedStr = ""

    wire_key: ClassVar[str] = "organization"

    @classmethod
    def endpoint(cls) -> Endpoint:
        """Return the endpoint for the class."""
        return Endpoint.Organizations


class Location(ForemanObject, APIMixin):
    """A location."""

    title: ForcedStr = Field(default="", exclude=True)
    description: ForcedStr = ""

    wire_key: ClassVar[str] = "location"

    @classmethod
    def endpoint(cls) -> Endpoint:
        """Return the endpoint for the class."""
        return Endpoint.Locations


class CommonParameter(ForemanObject, APIMixin):
    """A global parameter, inherited by every host."""

    value: ForcedStr = ""

    wire_key: ClassVar[str] = "common_parameter"

    @classmethod
    def endpoint(cls) -> Endpoint:
        """Return the endpoint for the class."""
        return Endpoint.CommonParameters


class PowerAction(StrEnum):
    """Power actions for a host's BMC."""

    ON = "on"
    OFF = "off"
    SOFT = "soft"  # reboot
    CYCLE = "cycle"  # reset
    STATE = "state"


class BootDevice(StrEnum):
    """Boot devices for a host's BMC."""

    DISK = "disk"
    CDROM = "cdrom"
    PXE = "pxe"
    BIOS = "bios"


class PowerCommand(ForemanModel):
    """Power command sent to `hosts/<id>/power`."""

    power_action: PowerAction

    endpoint: ClassVar[Endpoint] = Endpoint.HostPower


class BootCommand(ForemanModel):
    """Boot device command sent to `hosts/<id>/boot`."""

    device: BootDevice

    endpoint: ClassVar[Endpoint] = Endpoint.HostBoot


HostCommand = PowerCommand | BootCommand


class PowerResponse(ForemanModel):
    """Response to a power command.

    `power` is a boolean result for actions, and the power state (e.g. "on")
    for the "state" action.
    """

    power_action: str | None = None
    power: bool | str | None = None

    def succeeded(self) -> bool:
        """Whether the command succeeded."""
        return self.power is not False


class BootResult(ForemanModel):
    """Result of a boot device command."""

    action: str | None = None
    result: bool | None = None


class BootResponse(ForemanModel):
    """Response to a boot device command."""

    boot: BootResult | None = None

    def succeeded(self) -> bool:
        """Whether the command succeeded."""
        return self.boot is None or self.boot.result is not False


def send_power_command(
    host_id: int, command: HostCommand, retry_count: int | None = None
) -> Any:
    """Send a power or boot device command to a host's BMC.

    :param host_id: The ID of the host.
    :param command: The command to send.
    :param retry_count: Maximum number of attempts. Defaults to the configured value.

    :raises InputFailure: If the command is neither a power nor a boot command.
    :raises OperationFailed: If the server reports that the command failed.

    :returns: The decoded response (`PowerResponse` or `BootResponse`).
    """
    response_type: type[PowerResponse] | type[BootResponse]
    match command:
        case PowerCommand():
            response_type = PowerResponse
        case BootCommand():
            response_type = BootResponse
        case _:
            raise InputFailure(
                f"Invalid operation: expected a power or boot command, got {command!r}"
            )

    path = command.endpoint.with_params(host_id)
    req = new_request("PUT", path, body=command.model_dump(mode="json"))
    response = send_with_retry(req, response_type, retry_count)
    logger.debug("Power response for host %s: %r", host_id, response)

    if not response.succeeded():
        raise OperationFailed(f"Failed power operation {command!r} on host {host_id}")
    return response
