"""Domain errors raised by the chat and recipe operations.

Routes translate these into HTTP responses; store failures surface as
pymongo's own PyMongoError and become 500s.
"""


class ChatAPIError(Exception):
    pass


class InvalidLimit(ChatAPIError):
    pass


class Conflict(ChatAPIError):
    pass


class ParticipantExists(Conflict):
    pass


class ParticipantMissing(ChatAPIError):
    pass


class NotFound(ChatAPIError):
    pass


class Unauthorized(ChatAPIError):
    pass
