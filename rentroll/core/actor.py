from dataclasses import dataclass
import uuid


@dataclass(frozen=True)
class Actor:
    """The acting user and the company every lookup is scoped to."""
    user_id: uuid.UUID
    company_id: uuid.UUID
