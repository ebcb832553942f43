from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from dateutil import parser as dateutil_parser
from pydantic import BaseModel, BeforeValidator, ConfigDict, PrivateAttr, ValidationError

from vivialconnect.client import ApiClient, resolve
from vivialconnect.errors import InvalidResponseError, NoContentError

log = logging.getLogger(__name__)

R = TypeVar("R", bound="Resource")


def parse_api_date(val: Any) -> Optional[datetime]:
    """ISO 8601 string (or datetime) -> aware UTC datetime; blanks -> None."""
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        dt = val
    else:
        dt = dateutil_parser.isoparse(str(val).strip())
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


ApiDate = Annotated[Optional[datetime], BeforeValidator(parse_api_date)]


class ApiModel(BaseModel):
    """
    Plain wire object: unknown keys from the API are ignored and numbers are
    accepted for string fields (error codes, LATAs come back either way).
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class Resource(ApiModel):
    """
    A REST resource bound to an :class:`ApiClient`.

    ``root_key`` wraps single objects on the wire, ``collection`` is the
    URL segment and ``collection_key`` the list key of collection replies.
    """
    root_key: ClassVar[str] = ""
    collection: ClassVar[str] = ""
    collection_key: ClassVar[str] = ""

    _client: Optional[ApiClient] = PrivateAttr(default=None)

    @property
    def client(self) -> ApiClient:
        return resolve(self._client)

    def bind(self: R, client: Optional[ApiClient]) -> R:
        self._client = client
        return self

    # ---------- payload parsing ----------

    @classmethod
    def from_payload(cls: Type[R], payload: Mapping[str, Any], client: Optional[ApiClient] = None) -> R:
        data = payload.get(cls.root_key, payload) if cls.root_key else payload
        return cls._validate(data).bind(client)

    @classmethod
    def list_from_payload(
            cls: Type[R],
            payload: Mapping[str, Any],
            client: Optional[ApiClient] = None,
            keys: Iterable[str] = (),
    ) -> List[R]:
        items: Any = None
        for key in (*keys, cls.collection_key):
            if key in payload:
                items = payload[key]
                break
        if not isinstance(items, list):
            return []
        return [cls._validate(item).bind(client) for item in items]

    @classmethod
    def _validate(cls: Type[R], data: Any) -> R:
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            log.warning("api_response_invalid", extra={"resource": cls.__name__, "err": str(e)})
            raise InvalidResponseError(f"{cls.__name__}: {e}", data) from e

    # ---------- shared verbs ----------

    @classmethod
    def _class_url(cls, client: ApiClient, suffix: Optional[str] = None) -> str:
        return client.class_url(cls.collection, suffix)

    @classmethod
    def _fetch(cls: Type[R], suffix: Optional[str] = None, params=None, client: Optional[ApiClient] = None) -> R:
        c = resolve(client)
        return cls.from_payload(c.request("GET", cls._class_url(c, suffix), params=params), c)

    @classmethod
    def _fetch_list(cls: Type[R], suffix: Optional[str] = None, params=None, client: Optional[ApiClient] = None,
                    keys: Iterable[str] = ()) -> List[R]:
        c = resolve(client)
        payload = c.request("GET", cls._class_url(c, suffix), params=params)
        return cls.list_from_payload(payload, c, keys)

    @classmethod
    def _count(cls, suffix: str = "count", client: Optional[ApiClient] = None) -> int:
        c = resolve(client)
        payload = c.request("GET", cls._class_url(c, suffix))
        return int(payload.get("count") or 0)

    def _delete(self, path: str) -> bool:
        """True when the API confirms with no content, False otherwise."""
        try:
            self.client.request("DELETE", path)
        except NoContentError:
            log.debug("resource_deleted", extra={"resource": self.root_key, "path": path})
            return True
        return False

    def _update_object_state(self, other: "Resource", fields: Optional[Iterable[str]] = None) -> None:
        for name in fields if fields is not None else type(self).model_fields:
            setattr(self, name, getattr(other, name))

    def _require_id(self) -> int:
        if not getattr(self, "id", None):
            raise ValueError(f"{type(self).__name__} has no id; fetch or create it first")
        return self.id  # type: ignore[attr-defined]
