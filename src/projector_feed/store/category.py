"""Reading messages from Message DB categories.

A category groups all streams sharing a prefix: "projector:v0-1" and
"projector:v0-2" both belong to the "projector:v0" category. Subscribers poll
a category to learn about changes to any projector.
"""

from typing import Any, cast

import structlog

from projector_feed.store.client import MessageDBClient
from projector_feed.store.operations import MESSAGE_COLUMNS, Message, row_to_message

logger = structlog.get_logger(__name__)

_CATEGORY_QUERY = (
    f"SELECT {MESSAGE_COLUMNS} FROM message_store.get_category_messages("
    "%(category)s, %(position)s, %(batch_size)s, NULL,"
    " %(consumer_group_member)s, %(consumer_group_size)s, NULL)"
)


def get_category_messages(
    client: MessageDBClient,
    category: str,
    position: int = 0,
    batch_size: int = 1000,
    consumer_group_member: int | None = None,
    consumer_group_size: int | None = None,
) -> list[Message]:
    """Read messages of all streams in a category, ordered by global position.

    Args:
        client: Connected MessageDBClient
        category: Category to read (e.g., "projector:v0")
        position: Global position to start from (default: 0)
        batch_size: Maximum number of messages to retrieve (default: 1000)
        consumer_group_member: Member number (0-based) when reading as a consumer group
        consumer_group_size: Number of members in the consumer group

    Raises:
        ValueError: If only one of the consumer group parameters is set
        psycopg.Error: If the query fails
        RuntimeError: If the client is not connected
    """
    if (consumer_group_member is None) != (consumer_group_size is None):
        raise ValueError(
            "consumer_group_member and consumer_group_size must both be set or both be None"
        )

    params = {
        "category": category,
        "position": position,
        "batch_size": batch_size,
        "consumer_group_member": consumer_group_member,
        "consumer_group_size": consumer_group_size,
    }
    with client.connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(_CATEGORY_QUERY, params)
                rows = cur.fetchall()
            # Ends the read transaction so the pooled connection is idle again
            conn.commit()
        except Exception as e:
            logger.error(
                "category_read_failed",
                category=category,
                position=position,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    return [row_to_message(cast(dict[str, Any], row)) for row in rows]


def get_category_head(client: MessageDBClient, category: str) -> int:
    """Return the global position of the newest message in a category, or 0 if it is empty.

    Raises:
        psycopg.Error: If the query fails
        RuntimeError: If the client is not connected
    """
    with client.connection() as conn:
        with conn.cursor() as cur:
            cur.execute(
                "SELECT COALESCE(MAX(global_position), 0) AS head"
                " FROM message_store.messages"
                " WHERE message_store.category(stream_name) = %(category)s",
                {"category": category},
            )
            row = cur.fetchone()
        conn.commit()

    head = int(row["head"]) if row else 0
    logger.debug("category_head_read", category=category, head=head)
    return head
