from fastapi import HTTPException, Request, status

from payment_blocks.services.payment_block import PaymentBlockService


def get_payment_block_service(request: Request) -> PaymentBlockService:
    """Dependency for getting the payment block service.

    The service is built once during application startup and kept on the
    application state.

    Args:
        request: The FastAPI request object

    Returns:
        The application's PaymentBlockService

    Raises:
        HTTPException: If the application has not finished starting up
    """
    service = getattr(request.app.state, "payment_block_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment block service is not available",
        )
    return service
