from __future__ import annotations
from .account import Account
from .connector import Callback, Connector, PhoneNumber
from .contact import Contact
from .message import Attachment, Message
from .number import Capabilities, Carrier, Number, NumberInfo

__all__ = [
    "Account",
    "Attachment",
    "Callback",
    "Capabilities",
    "Carrier",
    "Connector",
    "Contact",
    "Message",
    "Number",
    "NumberInfo",
    "PhoneNumber",
]
