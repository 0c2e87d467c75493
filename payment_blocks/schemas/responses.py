from pydantic import BaseModel, ConfigDict, Field


class HealthCheckResponseSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = Field(description="Whether the service is up")


class ErrorResponseSchema(BaseModel):
    """Body of every error response.

    Attributes:
        error: Human-readable description of what went wrong
    """

    model_config = ConfigDict(frozen=True)

    error: str = Field(description="Human-readable description of what went wrong")
