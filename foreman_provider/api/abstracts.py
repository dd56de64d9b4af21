"""Abstract models for the API."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Self, TypeVar, cast

from pydantic import (
    BaseModel,
    ConfigDict,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)

from foreman_provider.api.endpoints import Endpoint
from foreman_provider.exceptions import EntityNotFound, InputFailure, MultipleEntitiesFound
from foreman_provider.utilities.api import new_request, send_and_parse, send_with_retry

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ForemanModel(BaseModel):
    """Base model for data exchanged with the API.

    Fields listed in `omit_when_empty` are left out of the serialized
    output when they hold a falsy value.
    """

    omit_when_empty: ClassVar[frozenset[str]] = frozenset()

    model_config = ConfigDict(
        # Construct by field name, decode by wire name
        populate_by_name=True,
        extra="ignore",
    )

    @model_serializer(mode="wrap")
    def _omit_empty_fields(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name in self.omit_when_empty:
            if getattr(self, name, None):
                continue
            field = type(self).model_fields[name]
            data.pop(name, None)
            if field.serialization_alias:
                data.pop(field.serialization_alias, None)
        return data


class ForemanObject(ForemanModel):
    """Attributes shared by every Foreman entity.

    The ID is assigned by the server on creation and is the only identity
    used to address the entity afterwards.
    """

    id: int | None = None  # noqa: A003
    name: str = ""

    omit_when_empty: ClassVar[frozenset[str]] = frozenset({"id"})

    @field_validator("id", mode="before")
    @classmethod
    def _zero_id_is_unset(cls, v: Any) -> Any:
        """Treat an ID of 0 as unset."""
        return v or None


class QueryResponse(BaseModel, Generic[ModelT]):
    """Search response from a collection endpoint."""

    total: int = 0
    subtotal: int = 0
    page: int | None = None
    per_page: int | None = None
    search: str | None = None
    results: list[ModelT] = []

    @field_validator("total", "subtotal", mode="before")
    @classmethod
    def _none_count_is_0(cls, v: Any) -> Any:
        """Ensure counts are never `None`."""
        return v or 0

    @field_validator("results", mode="before")
    @classmethod
    def _none_results_is_empty(cls, v: Any) -> Any:
        return v or []


class APIMixin(ABC):
    """A mixin for API-related methods.

    Subclasses set `wire_key` to the key the API expects writes to be
    nested under, and `search_field` to the field used for exact-match
    queries.
    """

    wire_key: ClassVar[str]
    search_field: ClassVar[str] = "name"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Ensure that the subclass inherits from BaseModel."""
        super().__init_subclass__(**kwargs)
        if BaseModel not in cls.__mro__:
            raise TypeError(
                f"{cls.__name__} must be applied on classes inheriting from BaseModel."
            )

    @classmethod
    @abstractmethod
    def endpoint(cls) -> Endpoint:
        """Return the endpoint for the class."""
        raise NotImplementedError("You must define an endpoint.")

    @property
    def _model(self) -> BaseModel:
        # __init_subclass__ guarantees we inherit from BaseModel
        return cast(BaseModel, self)

    def _require_id(self) -> int:
        _id = getattr(self, "id", None)
        if not _id:
            raise InputFailure(f"{self.__class__.__name__} {self._label()} has no ID.")
        return _id

    def _label(self) -> str:
        return repr(getattr(self, self.search_field, ""))

    def to_payload(self) -> dict[str, Any]:
        """Encode the entity the way the API expects it in a request body."""
        return self._model.model_dump(mode="json", by_alias=True)

    def wrapped_payload(self) -> dict[str, Any]:
        """Encode the entity nested under its wire key."""
        return {self.wire_key: self.to_payload()}

    @classmethod
    def read(cls, _id: int) -> Self:
        """Fetch an entity by its ID.

        :param _id: The ID of the entity.
        :raises APIError: If the entity could not be fetched (including 404).
        :returns: The entity as returned by the server.
        """
        req = new_request("GET", cls.endpoint().with_id(_id))
        obj = send_and_parse(req, cls)
        logger.debug("Read %s: %r", cls.__name__, obj)
        return obj

    def create(self, retry_count: int | None = None) -> Self:
        """Create the entity on the server.

        :param retry_count: Maximum number of attempts. Defaults to the configured value.
        :raises InputFailure: If the entity already has an ID.
        :returns: A new object populated from the server's response.
        """
        if getattr(self, "id", None):
            raise InputFailure(
                f"Cannot create {self.__class__.__name__} {self._label()}: it already has an ID."
            )
        req = new_request("POST", str(self.endpoint()), body=self.wrapped_payload())
        obj = send_with_retry(req, self.__class__, retry_count)
        logger.info("Created %s %s with ID %s", self.__class__.__name__, self._label(), obj.id)
        return obj

    def update(self, retry_count: int | None = None) -> Self:
        """Update the entity on the server.

        Note that the returned object is what the server returned, not a
        merge of this object and the previous server state.

        :param retry_count: Maximum number of attempts. Defaults to the configured value.
        :raises InputFailure: If the entity has no ID.
        :returns: A new object populated from the server's response.
        """
        _id = self._require_id()
        req = new_request("PUT", self.endpoint().with_id(_id), body=self.wrapped_payload())
        obj = send_with_retry(req, self.__class__, retry_count)
        logger.info("Updated %s with ID %s", self.__class__.__name__, _id)
        return obj

    @classmethod
    def delete_by_id(cls, _id: int) -> None:
        """Delete the entity with the given ID.

        :param _id: The ID of the entity.
        """
        req = new_request("DELETE", cls.endpoint().with_id(_id))
        send_and_parse(req, None)
        logger.info("Deleted %s with ID %s", cls.__name__, _id)

    def delete(self) -> None:
        """Delete the entity.

        :raises InputFailure: If the entity has no ID.
        """
        self.delete_by_id(self._require_id())

    def search_query(self) -> str:
        """Build an exact-match search filter from this entity.

        Falls back to searching by name when `search_field` is empty, e.g.
        a hostgroup whose title has not been computed by the server yet.
        """
        field = self.search_field
        value = str(getattr(self, field, "") or "")
        if not value and field != "name":
            field = "name"
            value = str(getattr(self, field, "") or "")
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'{field}="{escaped}"'

    def query(self) -> QueryResponse[Self]:
        """Search for entities matching this one on `search_field`.

        :returns: The search response with typed results.
        """
        cls = self.__class__
        req = new_request("GET", str(cls.endpoint()), params={"search": self.search_query()})
        resp = send_and_parse(req, QueryResponse[cls])  # type: ignore[valid-type]
        logger.debug(
            "Query %s (%s) matched %d of %d",
            cls.__name__,
            self.search_query(),
            resp.subtotal,
            resp.total,
        )
        return resp

    def query_unique(self) -> Self:
        """Search for exactly one entity matching this one on `search_field`.

        :raises EntityNotFound: If there are no matches.
        :raises MultipleEntitiesFound: If there is more than one match.
        :returns: The matching entity.
        """
        resp = self.query()
        name = self.__class__.__name__
        if resp.subtotal > 1 or len(resp.results) > 1:
            raise MultipleEntitiesFound(
                f"{name} query {self.search_query()} returned more than one result."
            )
        if resp.subtotal == 0 or not resp.results:
            raise EntityNotFound(f"{name} query {self.search_query()} returned no results.")
        return resp.results[0]
