"""
Database Schemas for the chat room and the recipe catalog

Each document model mirrors a MongoDB collection; the request models are the
bodies the routes accept. Every client supplied string is stripped of markup
and trimmed before it reaches the database.
"""
from typing import Literal, Optional

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field, field_validator

BROADCAST = "Todos"


def sanitize(value: str) -> str:
    """Drop any markup from a string and trim the remaining text."""
    return BeautifulSoup(value, "html.parser").get_text().strip()


def _sanitize_required(value: str) -> str:
    cleaned = sanitize(value)
    if not cleaned:
        raise ValueError("must not be empty")
    return cleaned


class Participant(BaseModel):
    """
    Active chat participants
    Collection: "participants"
    """
    name: str = Field(..., description="Unique display name")
    lastStatus: int = Field(..., description="Last heartbeat, epoch milliseconds")


class Message(BaseModel):
    """
    Chat messages, including the join/leave status events
    Collection: "messages"
    """
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from", description="Author name")
    to: str = Field(..., description="Recipient name or 'Todos'")
    text: str
    type: Literal["message", "private_message", "status"]
    time: str = Field(..., description="HH:MM:SS at insertion")


class Recipe(BaseModel):
    """
    Recipes
    Collection: "receitas"
    """
    titulo: Optional[str] = None
    preparo: Optional[str] = None
    ingredientes: Optional[str] = None


# Request bodies

class JoinRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str) -> str:
        return _sanitize_required(v)


class MessageRequest(BaseModel):
    to: str
    text: str
    type: Literal["message", "private_message"]

    @field_validator("to", "text")
    @classmethod
    def clean_text(cls, v: str) -> str:
        return _sanitize_required(v)


class RecipeRequest(Recipe):
    pass


class RecipeTitleRequest(BaseModel):
    titulo: Optional[str] = None
