"""
Counseling Chat API Routes

POST /api/chat          one chat turn
GET  /api/chat/summary  summary of the current user's conversation
"""

import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db import get_db
from models.schemas_user import UserOut
from utils.auth_utils import auth_user
from utils import crud_assessment as crud
from assessment.logic.contracts import CategoryScores
from .assistant import CounselingAssistant, assistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


class ChatRequest(BaseModel):
    message: str
    session_id: Optional[str] = None
    scores: Optional[CategoryScores] = None


class ChatResponse(BaseModel):
    response: str
    session_id: Optional[str] = None


def get_assistant() -> CounselingAssistant:
    return assistant


def _latest_scores(user_id: str) -> Optional[CategoryScores]:
    try:
        db: Session
        with get_db() as db:
            latest = crud.get_latest_assessment(db, user_id)
            return CategoryScores(**latest.riasec_scores) if latest else None
    except SQLAlchemyError as e:
        logger.error(f"Could not load latest assessment for user {user_id}: {e}")
        return None


@router.post("", response_model=ChatResponse, summary="Send a chat message")
@router.post("/", response_model=ChatResponse, summary="Send a chat message", include_in_schema=False)
def chat(
    payload: ChatRequest,
    background_tasks: BackgroundTasks,
    current: UserOut = Depends(auth_user),
    counselor: CounselingAssistant = Depends(get_assistant),
):
    """
    **Request Body:**
    - `message`: the student's message
    - `session_id`: chat session to append to (a new one is created when absent or unknown)
    - `scores`: RIASEC scores to use; defaults to the latest assessment

    Always answers with a message, including for rate-limited or filtered input.
    """
    default_scores = _latest_scores(current.id) if payload.scores is None else None
    reply = counselor.respond(current.id, payload.message, scores=payload.scores, default_scores=default_scores)

    if reply.kind == "answer":
        background_tasks.add_task(counselor.extract_interests, current.id, payload.message)

    session_id = payload.session_id
    try:
        db: Session
        with get_db() as db:
            chat_session = crud.get_chat_session(db, session_id) if session_id else None
            if chat_session is None or chat_session.user_id != current.id:
                chat_session = crud.create_chat_session(db, user_id=current.id)
            crud.append_chat_messages(db, chat_session, [
                {"role": "user", "content": payload.message},
                {"role": "assistant", "content": reply.text},
            ])
            session_id = chat_session.id
    except SQLAlchemyError as e:
        logger.error(f"Failed to persist chat session for user {current.id}: {e}")

    return ChatResponse(response=reply.text, session_id=session_id)


@router.get("/summary", summary="Summarize the conversation so far")
def chat_summary(
    current: UserOut = Depends(auth_user),
    counselor: CounselingAssistant = Depends(get_assistant),
):
    return {"summary": counselor.summarize(current.id)}
