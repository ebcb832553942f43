from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from vivialconnect.body import json_body
from vivialconnect.client import ApiClient, resolve
from vivialconnect.errors import NumberTypeError
from vivialconnect.models.base import ApiDate, ApiModel, Resource

log = logging.getLogger(__name__)

AVAILABLE_US_LOCAL = "available/US/local"
# available-number searches have been answered under both keys
AVAILABLE_KEYS = ("available_phone_numbers", "phone_numbers")


def _with_param(key: str, value: Optional[str], query_params: Optional[Mapping[str, str]]) -> Dict[str, str]:
    params = dict(query_params or {})
    if value:
        params[key] = value
    return params


class Capabilities(ApiModel):
    mms: Optional[bool] = None
    sms: Optional[bool] = None
    voice: Optional[bool] = None


class Carrier(ApiModel):
    name: Optional[str] = None
    country: Optional[str] = None


class NumberInfo(Resource):
    """Carrier and device details returned by a number lookup."""
    root_key: ClassVar[str] = "number_info"

    phone_number: Optional[str] = None
    date_created: ApiDate = None
    date_modified: ApiDate = None
    device_type: Optional[str] = None
    carrier: Optional[Carrier] = None


class Number(Resource):
    """
    A phone number, either associated with the account or available for purchase.

    Associated numbers support update/delete/lookup; available numbers
    (from the ``find_available_numbers_*`` searches) support :meth:`buy`.
    """
    root_key: ClassVar[str] = "phone_number"
    collection: ClassVar[str] = "numbers"
    collection_key: ClassVar[str] = "phone_numbers"

    id: Optional[int] = None
    date_created: ApiDate = None
    date_modified: ApiDate = None
    account_id: Optional[int] = None
    name: Optional[str] = None
    phone_number: Optional[str] = None
    # local or tollfree
    phone_number_type: Optional[str] = None
    status_text_url: Optional[str] = None
    incoming_text_url: Optional[str] = None
    incoming_text_method: Optional[str] = None
    incoming_text_fallback_url: Optional[str] = None
    incoming_text_fallback_method: Optional[str] = None
    voice_forwarding_number: Optional[str] = None
    capabilities: Optional[Capabilities] = None
    city: Optional[str] = None
    region: Optional[str] = None
    lata: Optional[str] = None
    rate_center: Optional[str] = None
    active: Optional[bool] = None
    connector_id: Optional[int] = None

    @property
    def is_local(self) -> bool:
        return self.phone_number_type == "local"

    def _ensure_local(self) -> None:
        if not self.is_local:
            raise NumberTypeError(f"Number {self.phone_number or self.id} is not local")

    # ---------- associated numbers ----------

    @classmethod
    def get_associated_numbers(cls, query_params: Optional[Mapping[str, str]] = None,
                               client: Optional[ApiClient] = None) -> List["Number"]:
        return cls._fetch_list(params=query_params, client=client)

    @classmethod
    def get_local_associated_numbers(cls, query_params: Optional[Mapping[str, str]] = None,
                                     client: Optional[ApiClient] = None) -> List["Number"]:
        return cls._fetch_list("local", params=query_params, client=client)

    @classmethod
    def get_by_id(cls, number_id: int, client: Optional[ApiClient] = None) -> "Number":
        return cls._fetch(str(number_id), client=client)

    @classmethod
    def get_local_by_id(cls, number_id: int, client: Optional[ApiClient] = None) -> "Number":
        return cls._fetch(f"local/{number_id}", client=client)

    @classmethod
    def count(cls, client: Optional[ApiClient] = None) -> int:
        return cls._count(client=client)

    @classmethod
    def count_local(cls, client: Optional[ApiClient] = None) -> int:
        return cls._count("local/count", client=client)

    # ---------- available numbers ----------

    @classmethod
    def _find_available(cls, params: Dict[str, str], client: Optional[ApiClient]) -> List["Number"]:
        return cls._fetch_list(AVAILABLE_US_LOCAL, params=params, client=client, keys=AVAILABLE_KEYS)

    @classmethod
    def find_available_numbers_in_region(cls, region: str, query_params: Optional[Mapping[str, str]] = None,
                                         client: Optional[ApiClient] = None) -> List["Number"]:
        """US local numbers for sale in a two-letter state/region, e.g. ``"CA"``."""
        return cls._find_available(_with_param("in_region", region, query_params), client)

    @classmethod
    def find_available_numbers_by_area_code(cls, area_code: str, query_params: Optional[Mapping[str, str]] = None,
                                            client: Optional[ApiClient] = None) -> List["Number"]:
        return cls._find_available(_with_param("area_code", area_code, query_params), client)

    @classmethod
    def find_available_numbers_by_postal_code(cls, postal_code: str, query_params: Optional[Mapping[str, str]] = None,
                                              client: Optional[ApiClient] = None) -> List["Number"]:
        return cls._find_available(_with_param("in_postal_code", postal_code, query_params), client)

    # ---------- purchase ----------

    @classmethod
    def buy_number(cls, phone_number: Optional[str] = None, area_code: Optional[str] = None,
                   phone_number_type: Optional[str] = None, optional_params: Optional[Mapping[str, Any]] = None,
                   client: Optional[ApiClient] = None) -> "Number":
        """
        Buy a specific ``phone_number``, or any number in ``area_code``.
        ``optional_params`` may carry name, connector_id, incoming_text_url, etc.
        """
        c = resolve(client)
        body = json_body(
            cls.root_key,
            optional={
                "phone_number": phone_number,
                "area_code": area_code,
                "phone_number_type": phone_number_type,
            },
            extra=optional_params,
        )
        payload = c.request("POST", c.class_url(cls.collection), body=body)
        bought = cls.from_payload(payload, c)
        log.info("number_bought", extra={"number_id": bought.id, "phone_number": bought.phone_number})
        return bought

    @classmethod
    def buy_local_number(cls, phone_number: Optional[str] = None, area_code: Optional[str] = None,
                         optional_params: Optional[Mapping[str, Any]] = None,
                         client: Optional[ApiClient] = None) -> "Number":
        c = resolve(client)
        body = json_body(
            cls.root_key,
            optional={"phone_number": phone_number, "area_code": area_code},
            extra=optional_params,
        )
        payload = c.request("POST", c.class_url(cls.collection, "local"), body=body)
        bought = cls.from_payload(payload, c)
        log.info("number_bought", extra={"number_id": bought.id, "phone_number": bought.phone_number})
        return bought

    def buy(self) -> "Number":
        """Buy this available number; returns the new associated number."""
        c = self.client
        body = json_body(
            self.root_key,
            fields={
                "phone_number": self.phone_number,
                "phone_number_type": self.phone_number_type,
            },
            optional={
                "name": self.name,
                "status_text_url": self.status_text_url,
                "connector_id": self.connector_id,
                "incoming_text_url": self.incoming_text_url,
                "incoming_text_method": self.incoming_text_method,
                "incoming_text_fallback_url": self.incoming_text_fallback_url,
                "incoming_text_fallback_method": self.incoming_text_fallback_method,
            },
        )
        payload = c.request("POST", c.class_url(self.collection), body=body)
        bought = Number.from_payload(payload, c)
        log.info("number_bought", extra={"number_id": bought.id, "phone_number": bought.phone_number})
        return bought

    # ---------- update / delete ----------

    def _update_body(self) -> dict:
        return json_body(
            self.root_key,
            optional={
                "id": self.id,
                "connector_id": self.connector_id,
                "incoming_text_url": self.incoming_text_url,
                "incoming_text_method": self.incoming_text_method,
                "incoming_text_fallback_url": self.incoming_text_fallback_url,
                "incoming_text_fallback_method": self.incoming_text_fallback_method,
                "voice_forwarding_number": self.voice_forwarding_number,
            },
        )

    def _put(self, suffix: str) -> "Number":
        c = self.client
        payload = c.request("PUT", c.class_url(self.collection, suffix), body=self._update_body())
        self._update_object_state(Number.from_payload(payload, c))
        return self

    def update(self) -> "Number":
        return self._put(str(self._require_id()))

    def update_local_number(self) -> "Number":
        self._ensure_local()
        return self._put(f"local/{self._require_id()}")

    def delete(self) -> bool:
        return self._delete(self.client.class_url(self.collection, str(self._require_id())))

    def delete_local_number(self) -> bool:
        self._ensure_local()
        return self._delete(self.client.class_url(self.collection, f"local/{self._require_id()}"))

    # ---------- lookup ----------

    def lookup(self) -> NumberInfo:
        if not self.phone_number:
            raise ValueError("phone_number is required for a lookup")
        c = self.client
        # the API expects the number without its leading '+'
        params = {"phone_number": self.phone_number.lstrip("+")}
        payload = c.request("GET", c.class_url(self.collection, "lookup"), params=params)
        return NumberInfo.from_payload(payload, c)
