"""Writing and reading single Message DB streams.

Projector events are written through Message DB's ``write_message`` function,
which enforces the expected stream version, and read back in stream order
with ``get_stream_messages``.
"""

import json
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, cast

import structlog
from psycopg import errors as psycopg_errors

from projector_feed.store.client import MessageDBClient

logger = structlog.get_logger(__name__)

MESSAGE_COLUMNS = "id, stream_name, type, position, global_position, data, metadata, time"


@dataclass
class Message:
    """A single message read from a Message DB stream.

    Attributes:
        id: Unique identifier of the message (UUID)
        stream_name: Name of the stream containing this message
        type: Message type (e.g., "ElementProjected")
        position: Position of the message within its stream
        global_position: Global position across all streams
        data: Message payload (deserialized from JSON)
        metadata: Message metadata (deserialized from JSON, may be None)
        time: Timestamp when the message was recorded
    """

    id: str
    stream_name: str
    type: str
    position: int
    global_position: int
    data: dict[str, Any]
    metadata: dict[str, Any] | None
    time: datetime


class OptimisticConcurrencyError(Exception):
    """Raised when a write's expected version does not match the stream version.

    Attributes:
        stream_name: Name of the stream where the conflict occurred
        expected_version: The version that was expected
        actual_version: The actual current version of the stream (if known)
    """

    def __init__(
        self,
        stream_name: str,
        expected_version: int | None,
        actual_version: int | None = None,
    ) -> None:
        self.stream_name = stream_name
        self.expected_version = expected_version
        self.actual_version = actual_version
        message = (
            f"Optimistic concurrency check failed for stream '{stream_name}'. "
            f"Expected version: {expected_version}"
        )
        if actual_version is not None:
            message += f", Actual version: {actual_version}"
        super().__init__(message)


def _parse_actual_version(error_message: str) -> int | None:
    # Format: "Wrong expected version: {expected} (Stream: {stream}, Stream Version: {actual})"
    if "Stream Version:" not in error_message:
        return None
    try:
        return int(error_message.split("Stream Version:")[1].strip().rstrip(")"))
    except (IndexError, ValueError):
        return None


def _decode_json(raw: Any) -> dict[str, Any]:
    # jsonb columns arrive as dicts, text columns as strings
    if isinstance(raw, dict):
        return cast(dict[str, Any], raw)
    return cast(dict[str, Any], json.loads(raw))


def row_to_message(row: dict[str, Any]) -> Message:
    """Convert a Message DB result row to a Message."""
    raw_metadata = row["metadata"]
    return Message(
        id=str(row["id"]),
        stream_name=row["stream_name"],
        type=row["type"],
        position=int(row["position"]),
        global_position=int(row["global_position"]),
        data=_decode_json(row["data"]),
        metadata=_decode_json(raw_metadata) if raw_metadata is not None else None,
        time=row["time"],
    )


def write_message(
    client: MessageDBClient,
    stream_name: str,
    message_type: str,
    data: dict[str, Any],
    metadata: dict[str, Any] | None = None,
    expected_version: int | None = None,
) -> int:
    """Append a message to a stream.

    Args:
        client: Connected MessageDBClient
        stream_name: Stream to write to (e.g., "projector:v0-1")
        message_type: Type of the message (e.g., "ElementProjected")
        data: Message payload, stored as JSON
        metadata: Optional metadata, stored as JSON
        expected_version: Stream version the write requires (-1 for a new
            stream, None to skip the check)

    Returns:
        Position of the written message in the stream

    Raises:
        OptimisticConcurrencyError: If the stream is not at expected_version
        psycopg.Error: If the database rejects the write
        RuntimeError: If the client is not connected
    """
    message_id = str(uuid.uuid4())
    params = {
        "id": message_id,
        "stream_name": stream_name,
        "type": message_type,
        "data": json.dumps(data),
        "metadata": json.dumps(metadata) if metadata is not None else None,
        "expected_version": expected_version,
    }
    log = logger.bind(
        stream_name=stream_name,
        message_type=message_type,
        expected_version=expected_version,
    )

    with client.connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT write_message(%(id)s, %(stream_name)s, %(type)s,"
                    " %(data)s::jsonb, %(metadata)s::jsonb, %(expected_version)s)",
                    params,
                )
                row = cast(dict[str, Any] | None, cur.fetchone())
        except psycopg_errors.RaiseException as e:
            conn.rollback()
            if "Wrong expected version" not in str(e):
                log.error("message_write_failed", error=str(e))
                raise
            log.warning("message_version_conflict", error=str(e))
            raise OptimisticConcurrencyError(
                stream_name=stream_name,
                expected_version=expected_version,
                actual_version=_parse_actual_version(str(e)),
            ) from e
        if row is None:
            raise RuntimeError("write_message returned no result")
        conn.commit()

    position = int(row["write_message"])
    log.debug("message_written", message_id=message_id, position=position)
    return position


def read_stream(
    client: MessageDBClient,
    stream_name: str,
    position: int = 0,
    batch_size: int = 1000,
) -> list[Message]:
    """Read up to ``batch_size`` messages of a stream, starting at ``position``.

    Returns:
        Messages in stream order; an empty list if the stream does not exist

    Raises:
        psycopg.Error: If the query fails
        RuntimeError: If the client is not connected
    """
    with client.connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {MESSAGE_COLUMNS}"
                    " FROM get_stream_messages(%(stream_name)s, %(position)s, %(batch_size)s)",
                    {"stream_name": stream_name, "position": position, "batch_size": batch_size},
                )
                rows = cur.fetchall()
            conn.commit()
        except Exception as e:
            logger.error(
                "stream_read_failed",
                stream_name=stream_name,
                position=position,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    messages = [row_to_message(cast(dict[str, Any], row)) for row in rows]
    logger.debug(
        "stream_read", stream_name=stream_name, position=position, message_count=len(messages)
    )
    return messages
