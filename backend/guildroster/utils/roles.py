"""Role string decomposition.

The store keeps a member's roles as one comma-delimited string
(``"Admin, Moderator"``). ``split_roles`` turns it into individual labels.
"""

ROLE_DELIMITER = ","


def split_roles(raw: str | None) -> tuple[str, ...]:
    """Split a delimited role string into labels.

    Labels are trimmed, blanks are dropped and repeats keep their first
    position. Missing or blank input gives an empty tuple, never ``("",)``.

    Example:
        >>> split_roles("Admin, Moderator,Admin")
        ('Admin', 'Moderator')
        >>> split_roles(None)
        ()
    """
    if not raw or not raw.strip():
        return ()
    seen: dict[str, None] = {}
    for part in raw.split(ROLE_DELIMITER):
        label = part.strip()
        if label:
            seen.setdefault(label, None)
    return tuple(seen)
