"""
Categorizer — assigns a category label to a bank-statement description.

Matching is a case-insensitive substring test against ordered keyword
groups. The first group with a matching keyword wins, so a description
mentioning both "membership fee" and "entry" is categorized as Membership.
Anything unmatched falls through to "Misc".

This is a pure function of the description text: no state, no I/O.
"""

DEFAULT_CATEGORY = "Misc"

# Checked top to bottom; order is significant.
KEYWORD_GROUPS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Membership", ("tidyhq", "auscycling", "life membership", "membership fee", "affiliation")),
    ("Reimbursement", ("reimburse", "reimbursement")),
    ("Sponsorship", ("lake health group", "spons")),
    (
        "Equipment",
        (
            "troph",
            "engraving",
            "weed killer",
            "star outdoor",
            "electrical services",
            "asr electrical",
            "flowers",
        ),
    ),
    ("Event Fee", ("entryboss", "square", "race entry", "entry", "permits", "raffle")),
)

# Category list offered to clients when none has been saved yet.
DEFAULT_CATEGORIES: list[str] = [
    "Membership",
    "Event Fee",
    "Equipment",
    "Reimbursement",
    "Sponsorship",
    "Misc",
]


def categorize(description: str) -> str:
    """
    Return the category for a transaction description.

    Args:
        description: Free-text description from the bank statement.

    Returns:
        The first matching category label, or "Misc".
    """
    value = description.lower()
    for category, keywords in KEYWORD_GROUPS:
        if any(keyword in value for keyword in keywords):
            return category
    return DEFAULT_CATEGORY
