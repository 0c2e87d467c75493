from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CreateBlockRequest(BaseModel):
    """Request body for blocking a client's payments.

    Attributes:
        block_type: Classification label for the block
        reason_description: Why the client is being blocked
        created_by_user_id: Actor creating the block
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    block_type: str = Field(description="Classification label for the block")
    reason_description: str = Field(description="Why the client is being blocked")
    created_by_user_id: str = Field(description="Actor creating the block")


class UnblockRequest(BaseModel):
    """Request body for lifting a client's payment block.

    Both ``unblockedByUserId`` and ``unblocked_by_user_id`` are accepted.

    Attributes:
        unblocked_by_user_id: Actor lifting the block
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    unblocked_by_user_id: str = Field(description="Actor lifting the block")
