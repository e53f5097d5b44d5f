"""Stream name utilities for projector streams.

Projector streams follow the format: {category}:{version}-{projector_id}

Example:
    >>> build_stream_name("projector", "v0", 7)
    'projector:v0-7'
    >>> parse_stream_name("projector:v0-7")
    ('projector', 'v0', 7)
"""


def build_category_name(category: str, version: str) -> str:
    """Build the Message DB category name for a category and version.

    Raises:
        ValueError: If a component is empty or contains a separator character
    """
    if not category or not category.strip():
        raise ValueError("category cannot be empty")
    if not version or not version.strip():
        raise ValueError("version cannot be empty")
    if ":" in category or "-" in category:
        raise ValueError("category cannot contain ':' or '-' characters")
    if "-" in version:
        raise ValueError("version cannot contain '-' character")
    return f"{category}:{version}"


def build_stream_name(category: str, version: str, projector_id: int) -> str:
    """Build the stream name of a projector.

    Raises:
        ValueError: If a component is invalid or the projector id is not positive
    """
    if projector_id <= 0:
        raise ValueError(f"projector_id must be > 0, got {projector_id}")
    return f"{build_category_name(category, version)}-{projector_id}"


def parse_stream_name(stream_name: str) -> tuple[str, str, int]:
    """Parse a projector stream name into (category, version, projector_id).

    Raises:
        ValueError: If the stream name format is invalid
    """
    error = (
        f"Invalid stream name format: '{stream_name}'. "
        "Expected format: category:version-projector_id"
    )
    category, sep, rest = stream_name.partition(":")
    if not sep or not category.strip():
        raise ValueError(error)
    version, sep, raw_id = rest.partition("-")
    if not sep or not version.strip() or not raw_id.strip():
        raise ValueError(error)
    try:
        projector_id = int(raw_id)
    except ValueError as e:
        raise ValueError(error) from e
    if projector_id <= 0:
        raise ValueError(error)
    return category, version, projector_id
