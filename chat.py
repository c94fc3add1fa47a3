"""Participants and messages of the chat room."""
import logging
import time
from datetime import datetime
from typing import List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from database import MESSAGES, PARTICIPANTS, object_id, to_str_id
from errors import InvalidLimit, NotFound, ParticipantExists, ParticipantMissing, Unauthorized
from schemas import BROADCAST, Message, MessageRequest, Participant

logger = logging.getLogger(__name__)

JOIN_TEXT = "entra na sala..."
LEAVE_TEXT = "sai da sala..."


def now_ms() -> int:
    return int(time.time() * 1000)


def clock(ts: Optional[datetime] = None) -> str:
    return (ts or datetime.now()).strftime("%H:%M:%S")


def status_message(name: str, text: str, at: Optional[str] = None) -> dict:
    """A system generated join/leave event addressed to everyone."""
    msg = Message(from_=name, to=BROADCAST, text=text, type="status", time=at or clock())
    return msg.model_dump(by_alias=True)


# Participants

def join(db: Database, name: str) -> None:
    # Lookup then insert is not atomic: two concurrent joins can both pass.
    if db[PARTICIPANTS].find_one({"name": name}):
        logger.warning("Participant %s already exists", name)
        raise ParticipantExists(f"Participant {name} already exists")

    participant = Participant(name=name, lastStatus=now_ms())
    db[PARTICIPANTS].insert_one(participant.model_dump())
    db[MESSAGES].insert_one(status_message(name, JOIN_TEXT))
    logger.info("Participant %s joined", name)


def list_participants(db: Database) -> List[dict]:
    return [to_str_id(p) for p in db[PARTICIPANTS].find()]


def require_participant(db: Database, name: Optional[str]) -> dict:
    participant = db[PARTICIPANTS].find_one({"name": name}) if name else None
    if not participant:
        raise ParticipantMissing(f"Participant {name} does not exist")
    return participant


def heartbeat(db: Database, name: Optional[str]) -> None:
    require_participant(db, name)
    db[PARTICIPANTS].update_one({"name": name}, {"$set": {"lastStatus": now_ms()}})


# Messages

def visibility_filter(requester: str) -> dict:
    """
    Messages a participant may read: every public message, everything sent to
    'Todos' (status events included) and private messages they sent or received.
    """
    return {
        "$or": [
            {"type": "message"},
            {"to": BROADCAST},
            {
                "type": "private_message",
                "$or": [{"to": requester}, {"from": requester}],
            },
        ]
    }


def parse_limit(limit: Optional[str]) -> Optional[int]:
    if limit is None:
        return None
    try:
        n = int(limit)
    except ValueError:
        raise InvalidLimit(f"limit must be a positive integer, got {limit!r}") from None
    if n <= 0:
        raise InvalidLimit(f"limit must be a positive integer, got {limit!r}")
    return n


def post_message(db: Database, author: Optional[str], payload: MessageRequest) -> None:
    require_participant(db, author)
    msg = Message(from_=author, to=payload.to, text=payload.text, type=payload.type, time=clock())
    db[MESSAGES].insert_one(msg.model_dump(by_alias=True))


def list_messages(db: Database, requester: Optional[str], limit: Optional[str] = None) -> List[dict]:
    """Visible messages, newest first, at most `limit` of them."""
    require_participant(db, requester)
    n = parse_limit(limit)
    cursor = db[MESSAGES].find(visibility_filter(requester)).sort("_id", DESCENDING)
    if n is not None:
        cursor = cursor.limit(n)
    return [to_str_id(m) for m in cursor]


def _owned_message(db: Database, message_id: str, requester: Optional[str]) -> dict:
    oid = object_id(message_id)
    message = db[MESSAGES].find_one({"_id": oid}) if oid is not None else None
    if not message:
        raise NotFound(f"Message {message_id} not found")
    if message.get("type") == "status":
        raise Unauthorized(f"Message {message_id} is a status event")
    if message.get("from") != requester:
        raise Unauthorized(f"Message {message_id} does not belong to {requester}")
    return message


def delete_message(db: Database, message_id: str, requester: Optional[str]) -> None:
    message = _owned_message(db, message_id, requester)
    db[MESSAGES].delete_one({"_id": message["_id"]})


def update_message(db: Database, message_id: str, requester: Optional[str], payload: MessageRequest) -> None:
    message = _owned_message(db, message_id, requester)
    db[MESSAGES].update_one(
        {"_id": message["_id"]},
        {"$set": {"to": payload.to, "text": payload.text, "type": payload.type}},
    )
