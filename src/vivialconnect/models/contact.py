from __future__ import annotations

import logging
from typing import ClassVar, List, Optional

from vivialconnect.body import json_body
from vivialconnect.client import ApiClient
from vivialconnect.models.base import ApiDate, Resource

log = logging.getLogger(__name__)

WRITABLE_FIELDS = (
    "contact_type", "first_name", "last_name", "email", "company_name",
    "phone", "fax", "address1", "address2", "address3",
    "city", "state", "postal_code", "country",
)


class Contact(Resource):
    """Main, billing or technical contact of an account."""
    root_key: ClassVar[str] = "contact"
    collection: ClassVar[str] = "contacts"
    collection_key: ClassVar[str] = "contacts"

    id: Optional[int] = None
    date_created: ApiDate = None
    date_modified: ApiDate = None
    account_id: Optional[int] = None
    # main, billing or technical
    contact_type: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    address3: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def get_contacts(cls, client: Optional[ApiClient] = None) -> List["Contact"]:
        return cls._fetch_list(client=client)

    @classmethod
    def get_by_id(cls, contact_id: int, client: Optional[ApiClient] = None) -> "Contact":
        return cls._fetch(str(contact_id), client=client)

    @classmethod
    def count(cls, client: Optional[ApiClient] = None) -> int:
        return cls._count(client=client)

    def _body(self, with_id: bool = False) -> dict:
        optional = {k: getattr(self, k) for k in WRITABLE_FIELDS}
        if with_id:
            optional["id"] = self.id
        return json_body(self.root_key, optional=optional)

    def create(self) -> "Contact":
        c = self.client
        payload = c.request("POST", c.class_url(self.collection), body=self._body())
        self._update_object_state(Contact.from_payload(payload, c))
        log.info("contact_created", extra={"contact_id": self.id})
        return self

    def update(self) -> "Contact":
        c = self.client
        contact_id = self._require_id()
        payload = c.request("PUT", c.class_url(self.collection, str(contact_id)), body=self._body(with_id=True))
        self._update_object_state(Contact.from_payload(payload, c))
        return self

    def delete(self) -> bool:
        return self._delete(self.client.class_url(self.collection, str(self._require_id())))
