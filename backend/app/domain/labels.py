"""
Sequence labels for inserted rows.

Labels are derived from the row's own identifier, so they can only be
written after the INSERT has assigned it (flush first, then label).
"""


def sequence_label(prefix: str, row_id: int) -> str:
    """
    Format `row_id` as a 4-digit zero-padded label.

    Example:
        sequence_label("B NO -", 42) -> "B NO -0042"
    """
    return f"{prefix}{row_id:04d}"
