from datetime import datetime
from uuid import UUID

from pydantic import UUID4, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class PaymentBlock(BaseModel):
    """Model representing one payment-blocking episode for a client.

    A block is active from creation until it is lifted. Lifting records who
    lifted it and when; the record itself is never deleted.

    Attributes:
        id: Unique identifier of the block record
        client_id: ID of the client whose payments are blocked
        is_active: Whether the block is currently in force
        block_type: Caller-supplied classification label
        reason_description: Free-text reason for the block
        created_at: When the block was created (UTC)
        created_by_user_id: Actor who created the block
        unblocked_at: When the block was lifted, if it has been
        unblocked_by_user_id: Actor who lifted the block, if it has been
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    id: UUID4
    client_id: UUID
    is_active: bool
    block_type: str = Field(min_length=1)
    reason_description: str = Field(min_length=1)
    created_at: datetime
    created_by_user_id: str = Field(min_length=1)
    unblocked_at: datetime | None = None
    unblocked_by_user_id: str | None = None

    @model_validator(mode="after")
    def validate_lift_fields(self) -> "PaymentBlock":
        lifted = (self.unblocked_at is not None, self.unblocked_by_user_id is not None)
        if self.is_active and any(lifted):
            raise ValueError("An active block cannot carry unblock details")
        if not self.is_active and not all(lifted):
            raise ValueError(
                "A lifted block must record both unblocked_at and unblocked_by_user_id"
            )
        return self

    def lift(self, unblocked_by_user_id: str, unblocked_at: datetime) -> "PaymentBlock":
        """Return a lifted copy of this block."""
        if not self.is_active:
            raise ValueError("Block has already been lifted")
        return self.model_validate(
            self.model_dump()
            | {
                "is_active": False,
                "unblocked_at": unblocked_at,
                "unblocked_by_user_id": unblocked_by_user_id,
            }
        )
