from __future__ import annotations

from typing import ClassVar, Optional

from vivialconnect.body import json_body
from vivialconnect.client import ApiClient, resolve
from vivialconnect.models.base import ApiDate, Resource


class Account(Resource):
    root_key: ClassVar[str] = "account"

    id: Optional[int] = None
    date_created: ApiDate = None
    date_modified: ApiDate = None
    # parent account, set on subaccounts only
    account_id: Optional[int] = None
    company_name: Optional[str] = None

    @classmethod
    def get_account(cls, client: Optional[ApiClient] = None) -> "Account":
        """The account the client is authenticated as."""
        c = resolve(client)
        return cls.from_payload(c.request("GET", c.account_url()), c)

    def update(self) -> "Account":
        c = self.client
        body = json_body(self.root_key, fields={"id": self.id or c.account_id, "company_name": self.company_name})
        payload = c.request("PUT", c.account_url(), body=body)
        self._update_object_state(Account.from_payload(payload, c))
        return self
