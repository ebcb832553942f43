from __future__ import annotations

import logging
from typing import ClassVar, Dict, List, Optional

from vivialconnect.body import json_body
from vivialconnect.client import ApiClient
from vivialconnect.models.base import ApiDate, Resource

log = logging.getLogger(__name__)


class Attachment(Resource):
    """Media file sent or received with an MMS."""
    root_key: ClassVar[str] = "attachment"
    collection: ClassVar[str] = "messages"
    collection_key: ClassVar[str] = "attachments"

    id: Optional[int] = None
    date_created: ApiDate = None
    date_modified: ApiDate = None
    account_id: Optional[int] = None
    message_id: Optional[int] = None
    content_type: Optional[str] = None
    file_name: Optional[str] = None
    key_name: Optional[str] = None
    size: Optional[int] = None


class Message(Resource):
    """
    An inbound or outbound text message.

    To send, set ``to_number``, ``body`` and either ``from_number`` (an
    associated number of the account) or ``connector_id``. When
    ``connector_id`` is set the API ignores ``from_number``. Add media with
    :meth:`add_media_url` to send an MMS.
    """
    root_key: ClassVar[str] = "message"
    collection: ClassVar[str] = "messages"
    collection_key: ClassVar[str] = "messages"

    id: Optional[int] = None
    date_created: ApiDate = None
    date_modified: ApiDate = None
    account_id: Optional[int] = None
    # for subaccounts, the parent account
    master_account_id: Optional[int] = None
    # local_sms, tollfree_sms or local_mms
    message_type: Optional[str] = None
    direction: Optional[str] = None
    to_number: Optional[str] = None
    from_number: Optional[str] = None
    connector_id: Optional[int] = None
    sent: ApiDate = None
    num_media: Optional[int] = None
    num_segments: Optional[int] = None
    body: Optional[str] = None
    status: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    # fractions of the currency unit, e.g. 0.0075
    price: Optional[float] = None
    price_currency: Optional[str] = None
    media_urls: Optional[List[str]] = None

    # ---------- finders ----------

    @classmethod
    def get_by_id(cls, message_id: int, client: Optional[ApiClient] = None) -> "Message":
        return cls._fetch(str(message_id), client=client)

    @classmethod
    def get_messages(cls, query_params: Optional[Dict[str, str]] = None,
                     client: Optional[ApiClient] = None) -> List["Message"]:
        """All messages of the account, optionally filtered/paged by ``query_params``."""
        return cls._fetch_list(params=query_params, client=client)

    @classmethod
    def count(cls, client: Optional[ApiClient] = None) -> int:
        return cls._count(client=client)

    # ---------- instance operations ----------

    def add_media_url(self, media_url: str) -> "Message":
        if self.media_urls is None:
            self.media_urls = []
        self.media_urls.append(media_url)
        return self

    def _send_body(self) -> dict:
        return json_body(
            self.root_key,
            fields={
                "from_number": self.from_number,
                "to_number": self.to_number,
                "body": self.body,
            },
            optional={
                "media_urls": self.media_urls,
                "connector_id": self.connector_id,
            },
        )

    def send(self) -> "Message":
        c = self.client
        payload = c.request("POST", c.class_url(self.collection), body=self._send_body())
        sent = Message.from_payload(payload, c)
        self._update_object_state(sent)
        log.info("message_sent", extra={"message_id": self.id, "status": self.status})
        return self

    def redact(self) -> "Message":
        """Blank the body of this message on the server."""
        c = self.client
        message_id = self._require_id()
        body = json_body(self.root_key, fields={"id": message_id, "body": ""})
        payload = c.request("PUT", c.class_url(self.collection, str(message_id)), body=body)
        self._update_object_state(Message.from_payload(payload, c))
        return self

    def get_attachments(self) -> List[Attachment]:
        c = self.client
        message_id = self._require_id()
        payload = c.request("GET", c.class_url(self.collection, f"{message_id}/attachments"))
        return Attachment.list_from_payload(payload, c)
