from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from payment_blocks.dependencies import get_payment_block_service
from payment_blocks.models.payment_block import PaymentBlock
from payment_blocks.schemas.requests import CreateBlockRequest, UnblockRequest
from payment_blocks.schemas.responses import ErrorResponseSchema
from payment_blocks.services.payment_block import (
    AlreadyBlockedError,
    InvalidInputError,
    NoActiveBlockError,
    PaymentBlockService,
    StorageFailureError,
)

router = APIRouter(prefix="/internal/v1/clients", tags=["payment-block"])

ServiceDep = Annotated[PaymentBlockService, Depends(get_payment_block_service)]

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponseSchema},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponseSchema},
}


@router.post(
    "/{client_id}/payment-block",
    response_model=PaymentBlock,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_ERROR_RESPONSES,
        status.HTTP_409_CONFLICT: {"model": ErrorResponseSchema},
    },
)
async def block_client(
    client_id: str,
    body: CreateBlockRequest,
    service: ServiceDep,
) -> PaymentBlock:
    """Block a client's payments.

    Args:
        client_id: ID of the client to block
        body: Block type, reason and creating actor
        service: The payment block service

    Returns:
        The created block record

    Raises:
        HTTPException: If the input is invalid, the client is already blocked,
            or the block could not be stored
    """
    try:
        return await service.create_block(
            client_id,
            block_type=body.block_type,
            reason_description=body.reason_description,
            created_by_user_id=body.created_by_user_id,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AlreadyBlockedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        )


@router.delete(
    "/{client_id}/payment-block",
    response_model=PaymentBlock,
    responses={
        **_ERROR_RESPONSES,
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponseSchema},
    },
)
async def unblock_client(
    client_id: str,
    body: UnblockRequest,
    service: ServiceDep,
) -> PaymentBlock:
    """Lift a client's active payment block.

    Args:
        client_id: ID of the client to unblock
        body: The actor lifting the block
        service: The payment block service

    Returns:
        The lifted block record

    Raises:
        HTTPException: If the input is invalid, there is no active block,
            or the store fails
    """
    try:
        return await service.unblock(client_id, body.unblocked_by_user_id)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NoActiveBlockError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        )


@router.get(
    "/{client_id}/payment-block",
    response_model=PaymentBlock,
    responses={
        **_ERROR_RESPONSES,
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponseSchema},
    },
)
async def get_block_status(client_id: str, service: ServiceDep) -> PaymentBlock:
    """Get a client's active payment block.

    Args:
        client_id: ID of the client to check
        service: The payment block service

    Returns:
        The active block record

    Raises:
        HTTPException: If the input is invalid, there is no active block,
            or the store fails
    """
    try:
        return await service.get_status(client_id)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NoActiveBlockError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        )
