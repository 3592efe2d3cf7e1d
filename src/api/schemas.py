"""Request/response Pydantic models."""

from pydantic import BaseModel, field_validator

NO_SOURCES = "No external sources used."


class QueryRequest(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value


class ChatResponse(BaseModel):
    answer: str
    sources: str = NO_SOURCES


class ErrorResponse(BaseModel):
    error: str
