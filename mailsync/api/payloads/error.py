from pydantic import BaseModel


class APIError(BaseModel):
    """Error body rendered by the application exception handlers."""

    error: str
    error_description: str | None = None
