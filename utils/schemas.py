"""
Pydantic schemas for the card protocol shared by every connector.
"""

from __future__ import annotations

import hashlib
import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from utils.token_extractor import normalize_tokens


# ═══════════════════════════════════════════════════════════════════════════════
# Card request
# ═══════════════════════════════════════════════════════════════════════════════


class CardRequest(BaseModel):
    """
    Body of ``POST /cards/requests``.

    ``tokens`` maps a token name to the values the hub extracted from an
    email.  Values may be missing, ``null`` or empty.  ``email`` optionally
    carries the raw text so the connector can extract tokens itself.
    """

    tokens: Dict[str, List[str]] = Field(default_factory=dict)
    email: Optional[str] = None

    @field_validator("tokens", mode="before")
    @classmethod
    def _clean_tokens(cls, value: Any) -> Dict[str, List[str]]:
        if not value:
            return {}
        if not isinstance(value, dict):
            raise ValueError("tokens must be an object of name -> list of strings")
        cleaned: Dict[str, List[str]] = {}
        for name, values in value.items():
            if isinstance(values, str):
                values = [values]
            elif values is not None and not isinstance(values, list):
                raise ValueError(f"token '{name}' must be a list of strings")
            if values and any(isinstance(v, (dict, list)) for v in values):
                raise ValueError(f"token '{name}' must be a list of strings")
            cleaned[name] = normalize_tokens(values)
        return cleaned

    def token(self, name: str) -> List[str]:
        return self.tokens.get(name, [])

    def first(self, name: str) -> Optional[str]:
        values = self.token(name)
        return values[0] if values else None


# ═══════════════════════════════════════════════════════════════════════════════
# Card
# ═══════════════════════════════════════════════════════════════════════════════


class Link(BaseModel):
    href: str


class ActionKey(str, Enum):
    DIRECT = "DIRECT"
    USER_INPUT = "USER_INPUT"
    OPEN_IN = "OPEN_IN"


class CardActionInputField(BaseModel):
    """A field the user fills in before a USER_INPUT action is submitted."""

    id: str = Field(..., description="Form key used when the action is submitted")
    label: str
    format: str = "textarea"  # "textarea" | "select"
    min_length: int = 0


class CardAction(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    label: str
    completed_label: Optional[str] = None
    url: Link
    type: str = "POST"
    action_key: ActionKey = ActionKey.DIRECT
    request: Dict[str, str] = Field(default_factory=dict)
    user_input: List[CardActionInputField] = Field(default_factory=list)
    primary: bool = False
    mutually_exclusive_set_id: Optional[str] = None
    remove_card_on_completion: bool = False


class CardBodyField(BaseModel):
    type: str = "GENERAL"  # "GENERAL" | "COMMENT"
    title: str
    description: Optional[str] = None
    content: List[Dict[str, str]] = Field(default_factory=list)


class CardBody(BaseModel):
    description: Optional[str] = None
    fields: List[CardBodyField] = Field(default_factory=list)


class CardHeader(BaseModel):
    title: str
    subtitle: List[str] = Field(default_factory=list)


class Card(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    creation_date: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    name: str
    header: CardHeader
    body: CardBody = Field(default_factory=CardBody)
    actions: List[CardAction] = Field(default_factory=list)
    image: Optional[Link] = None
    backend_id: Optional[str] = None
    hash: str = ""

    def compute_hash(self) -> str:
        """
        SHA-1 over the card content.

        Random ids and timestamps are excluded so the same backend state
        always hashes the same.
        """
        content = self.model_dump(
            mode="json",
            exclude={"id", "creation_date", "hash", "image"},
        )
        for action in content.get("actions", []):
            action.pop("id", None)
        raw = json.dumps(content, sort_keys=True, ensure_ascii=False).encode()
        return hashlib.sha1(raw).hexdigest()

    def sealed(self) -> "Card":
        self.hash = self.compute_hash()
        return self


class Cards(BaseModel):
    cards: List[Card] = Field(default_factory=list)
