"""POST /api/chat and POST /api/scrape endpoint handlers."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.schemas import ChatResponse, ErrorResponse, QueryRequest
from src.chat.service import ChatService
from src.scraper.models import ScrapedContent
from src.scraper.service import ScrapeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

INVALID_INPUT = "Invalid input."


def _get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat


def _get_scrape_service(request: Request) -> ScrapeService:
    return request.app.state.scraper


async def _parse_query(request: Request) -> QueryRequest | None:
    try:
        return QueryRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        return None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: Request,
    service: ChatService = Depends(_get_chat_service),
):
    body = await _parse_query(request)
    if body is None:
        return _error(400, INVALID_INPUT)

    try:
        return await service.answer(body.query)
    except Exception as exc:
        logger.exception("chat request failed", extra={"query": body.query[:100]})
        return _error(500, str(exc) or "Internal server error")


@router.post("/scrape", response_model=ScrapedContent)
async def scrape(
    request: Request,
    service: ScrapeService = Depends(_get_scrape_service),
):
    body = await _parse_query(request)
    if body is None:
        return _error(400, INVALID_INPUT)

    try:
        return await service.scrape_and_search(body.query)
    except Exception as exc:
        logger.exception("scrape request failed", extra={"query": body.query[:100]})
        return _error(500, str(exc) or "Internal server error")
