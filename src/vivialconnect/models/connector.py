from __future__ import annotations

import logging
from typing import ClassVar, List, Optional, Sequence, Union

from vivialconnect.body import json_body
from vivialconnect.client import ApiClient
from vivialconnect.errors import NoContentError
from vivialconnect.models.base import ApiDate, ApiModel, Resource

log = logging.getLogger(__name__)

CALLBACK_FIELDS = ("date_modified", "callbacks")
PHONE_NUMBER_FIELDS = ("date_modified", "phone_numbers")


class Callback(ApiModel):
    """Webhook for one event type, e.g. ``incoming`` or ``status`` text events."""
    event_type: Optional[str] = None
    message_type: Optional[str] = None
    url: Optional[str] = None
    method: Optional[str] = None


class PhoneNumber(ApiModel):
    """An associated number routed through a connector."""
    phone_number_id: Optional[int] = None
    phone_number: Optional[str] = None


class Connector(Resource):
    """
    Routing configuration grouping callbacks and phone numbers.

    Messages sent with a ``connector_id`` go out from one of the connector's
    numbers, and its callbacks receive the inbound/status events.
    """
    root_key: ClassVar[str] = "connector"
    collection: ClassVar[str] = "connectors"
    collection_key: ClassVar[str] = "connectors"

    id: Optional[int] = None
    date_created: ApiDate = None
    date_modified: ApiDate = None
    account_id: Optional[int] = None
    active: Optional[bool] = None
    name: Optional[str] = None
    callbacks: Optional[List[Callback]] = None
    phone_numbers: Optional[List[PhoneNumber]] = None
    # phone_numbers is capped per reply; True when the connector holds more
    more_phone_numbers: Optional[bool] = None

    # ---------- finders ----------

    @classmethod
    def get_by_id(cls, connector_id: int, client: Optional[ApiClient] = None) -> "Connector":
        return cls._fetch(str(connector_id), client=client)

    @classmethod
    def get_connectors(cls, client: Optional[ApiClient] = None) -> List["Connector"]:
        return cls._fetch_list(client=client)

    @classmethod
    def count(cls, client: Optional[ApiClient] = None) -> int:
        return cls._count(client=client)

    # ---------- CRUD ----------

    def create(self) -> "Connector":
        c = self.client
        body = json_body(self.root_key, fields={"name": self.name})
        payload = c.request("POST", c.class_url(self.collection), body=body)
        self._update_object_state(Connector.from_payload(payload, c))
        log.info("connector_created", extra={"connector_id": self.id})
        return self

    def update(self) -> "Connector":
        c = self.client
        connector_id = self._require_id()
        body = json_body(self.root_key, fields={"id": connector_id, "name": self.name})
        payload = c.request("PUT", c.class_url(self.collection, str(connector_id)), body=body)
        self._update_object_state(Connector.from_payload(payload, c))
        return self

    def delete(self) -> bool:
        return self._delete(self.client.class_url(self.collection, str(self._require_id())))

    # ---------- sub-collections ----------

    def _sub_request(self, method: str, sub: str, key: str, items: Sequence, fields: Sequence[str]) -> "Connector":
        c = self.client
        body = json_body(self.root_key, fields={key: list(items)})
        payload = c.request(method, c.class_url(self.collection, f"{self._require_id()}/{sub}"), body=body)
        self._update_object_state(Connector.from_payload(payload, c), fields)
        return self

    def _sub_delete(self, sub: str, key: str, items: Sequence, fields: Sequence[str]) -> "Connector":
        try:
            return self._sub_request("DELETE", sub, key, items, fields)
        except NoContentError:
            # nothing echoed back: drop the removed entries locally
            current = getattr(self, key) or []
            setattr(self, key, [x for x in current if x not in items])
            return self

    # callbacks

    def add_callback(self, callback: Callback) -> "Connector":
        if self.callbacks is None:
            self.callbacks = []
        self.callbacks.append(callback)
        return self

    def create_callbacks(self) -> "Connector":
        return self._sub_request("POST", "callbacks", "callbacks", self.callbacks or [], CALLBACK_FIELDS)

    def update_callbacks(self) -> "Connector":
        return self._sub_request("PUT", "callbacks", "callbacks", self.callbacks or [], CALLBACK_FIELDS)

    def delete_callbacks(self, callbacks: Sequence[Callback]) -> "Connector":
        return self._sub_delete("callbacks", "callbacks", list(callbacks), CALLBACK_FIELDS)

    def delete_single_callback(self, callback: Callback) -> "Connector":
        return self.delete_callbacks([callback])

    def delete_all_callbacks(self) -> "Connector":
        return self.delete_callbacks(list(self.callbacks or []))

    # phone numbers

    def add_phone_number(self, phone_number: Union[PhoneNumber, int], number: Optional[str] = None) -> "Connector":
        """Accepts a :class:`PhoneNumber` or ``(phone_number_id, phone_number)``."""
        if not isinstance(phone_number, PhoneNumber):
            phone_number = PhoneNumber(phone_number_id=phone_number, phone_number=number)
        if self.phone_numbers is None:
            self.phone_numbers = []
        self.phone_numbers.append(phone_number)
        return self

    def create_phone_numbers(self) -> "Connector":
        return self._sub_request("POST", "phone_numbers", "phone_numbers", self.phone_numbers or [], PHONE_NUMBER_FIELDS)

    def update_phone_numbers(self) -> "Connector":
        return self._sub_request("PUT", "phone_numbers", "phone_numbers", self.phone_numbers or [], PHONE_NUMBER_FIELDS)

    def delete_phone_numbers(self, phone_numbers: Sequence[PhoneNumber]) -> "Connector":
        return self._sub_delete("phone_numbers", "phone_numbers", list(phone_numbers), PHONE_NUMBER_FIELDS)

    def delete_single_phone_number(self, phone_number: PhoneNumber) -> "Connector":
        return self.delete_phone_numbers([phone_number])

    def delete_all_phone_numbers(self) -> "Connector":
        return self.delete_phone_numbers(list(self.phone_numbers or []))
