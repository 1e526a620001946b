import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from cardwise.application.factory import Services, load_services
from cardwise.application.stats import ReviewTally
from cardwise.consts import VERSION
from cardwise.domain.errors import CardwiseError
from cardwise.infrastructure.adapters.deck_loader import parse_tsv

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cardwise.server")

_services: Services | None = None
_services_lock = asyncio.Lock()


async def get_services() -> Services:
    """Process-wide services, built from config on first use."""
    global _services
    async with _services_lock:
        if _services is None:
            from cardwise.application.config import resolve_config

            _services = await load_services(resolve_config())
    return _services


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Cardwise Server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("Cardwise Server shutting down...")
    if _services is not None:
        await _services.aclose()


app = FastAPI(
    title="Cardwise Server",
    description="Answer validation and spaced-repetition scheduling for flashcards.",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(CardwiseError)
async def cardwise_error_handler(request: Request, exc: CardwiseError):
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(status_code=exc.http_status, content={"detail": str(exc)})


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


class ReviewRequest(BaseModel):
    card_id: str
    user_id: str
    user_answer: str


class ReviewResponse(BaseModel):
    card_id: str
    ai_score: float
    fsrs_rating: int
    validation_method: str
    next_review_in_days: int


@app.post("/reviews", response_model=ReviewResponse, status_code=201)
async def submit_review(req: ReviewRequest, services: Services = Depends(get_services)):
    """
    Validate a free-text answer and reschedule the card.
    """
    outcome = await services.reviews.review(req.card_id, req.user_id, req.user_answer)
    return ReviewResponse(
        card_id=outcome.card_id,
        ai_score=outcome.score,
        fsrs_rating=int(outcome.rating),
        validation_method=outcome.method.value,
        next_review_in_days=outcome.scheduled_days,
    )


class CreateCardRequest(BaseModel):
    user_id: str
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    deck_id: str | None = None


class CardResponse(BaseModel):
    id: str
    user_id: str
    deck_id: str | None
    question: str
    answer: str
    has_embedding: bool


@app.post("/cards", response_model=CardResponse, status_code=201)
async def create_card(req: CreateCardRequest, services: Services = Depends(get_services)):
    card = await services.cards.create_card(
        user_id=req.user_id, question=req.question, answer=req.answer, deck_id=req.deck_id
    )
    return CardResponse(
        id=card.id,
        user_id=card.user_id,
        deck_id=card.deck_id,
        question=card.question,
        answer=card.answer,
        has_embedding=card.answer_embedding is not None,
    )


class ReviewLogResponse(BaseModel):
    id: str
    user_id: str
    user_answer: str
    expected_answer: str
    ai_score: float
    fsrs_rating: int
    validation_method: str
    created_at: str


@app.get("/cards/{card_id}/reviews", response_model=list[ReviewLogResponse])
async def list_card_reviews(card_id: str, services: Services = Depends(get_services)):
    records = await services.reviews.history(card_id)
    return [
        ReviewLogResponse(
            id=r.id,
            user_id=r.user_id,
            user_answer=r.user_answer,
            expected_answer=r.expected_answer,
            ai_score=r.score,
            fsrs_rating=int(r.rating),
            validation_method=r.method.value,
            created_at=r.created_at.isoformat(),
        )
        for r in records
    ]


class StatsResponse(BaseModel):
    total_reviews: int
    correct_reviews: int
    days_studied: int
    accuracy_percentage: float
    last_active_date: str | None


class UserStatsResponse(StatsResponse):
    user_id: str


class DeckStatsResponse(StatsResponse):
    deck_id: str
    total_cards: int


def _stats_fields(tally: ReviewTally) -> dict:
    last_active = tally.last_active_date
    return {
        "total_reviews": tally.total_reviews,
        "correct_reviews": tally.correct_reviews,
        "days_studied": tally.days_studied,
        "accuracy_percentage": round(tally.accuracy * 100, 2),
        "last_active_date": last_active.isoformat() if last_active else None,
    }


@app.get("/users/{user_id}/stats", response_model=UserStatsResponse)
async def get_user_stats(user_id: str, services: Services = Depends(get_services)):
    """Review tallies for a user; zeros until their first review."""
    return UserStatsResponse(user_id=user_id, **_stats_fields(services.stats.user_stats(user_id)))


@app.get("/decks/{deck_id}/stats", response_model=DeckStatsResponse)
async def get_deck_stats(deck_id: str, services: Services = Depends(get_services)):
    tally = services.stats.decks.get(deck_id)
    if tally is None:
        raise HTTPException(status_code=404, detail=f"Deck not found: {deck_id}")
    return DeckStatsResponse(deck_id=deck_id, total_cards=tally.card_count, **_stats_fields(tally))


class ImportResponse(BaseModel):
    deck_id: str
    cards_imported: int
    cards_skipped: int


@app.post("/decks/{deck_id}/import", response_model=ImportResponse, status_code=201)
async def import_tsv(
    deck_id: str, user_id: str, request: Request, services: Services = Depends(get_services)
):
    """
    Bulk-create cards from a TSV request body, one ``front<TAB>back`` per line.
    """
    deck = parse_tsv(await request.body(), name=deck_id)
    result = await services.cards.import_cards(
        user_id, deck.pairs, deck_id=deck_id, skipped=deck.skipped
    )
    return ImportResponse(
        deck_id=deck_id,
        cards_imported=result.cards_imported,
        cards_skipped=result.cards_skipped,
    )
