from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
from sqlalchemy.orm import Session
import os
import logging

from db import init_db, get_session
from models.schemas_user import UserRegister, UserLogin, UserOut, TokenResponse, RegisterResponse
from utils.crud_user import get_user_by_username, get_user_by_student_id, create_user
from utils.auth_utils import hash_password, verify_password, create_token, auth_user
from assessment.routes import router as assessment_router
from assessment.ai.similar_cases import case_retriever
from counseling.routes import router as chat_router
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting RIASEC major advisor")
    if case_retriever.initialize():
        logger.info("Similar-case retrieval enabled")
    else:
        logger.warning("Similar-case retrieval disabled; assessments will use fallback feedback")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="RIASEC Major Advisor",
    description="RIASEC assessment, major recommendations and counseling chat",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(assessment_router)
app.include_router(chat_router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "Internal server error",
            "timestamp": datetime.utcnow().isoformat(),
        }
    )


@app.post("/auth/register", response_model=RegisterResponse, status_code=201, tags=["auth"], summary="Register")
def register(payload: UserRegister, db: Session = Depends(get_session)):
    if get_user_by_student_id(db, payload.student_id):
        raise HTTPException(status_code=400, detail="Student ID already registered")
    if get_user_by_username(db, payload.username):
        raise HTTPException(status_code=400, detail="Username already taken")
    user = create_user(
        db,
        student_id=payload.student_id,
        username=payload.username,
        password_hash=hash_password(payload.password),
    )
    logger.info(f"Registered user {user.id}")
    return RegisterResponse(
        user=UserOut.model_validate(user),
        access_token=create_token(str(user.id)),
    )


@app.post("/auth/login", response_model=TokenResponse, tags=["auth"], summary="Login")
def login(payload: UserLogin, db: Session = Depends(get_session)):
    user = get_user_by_username(db, payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenResponse(access_token=create_token(str(user.id)))


@app.get("/auth/user", response_model=UserOut, tags=["auth"], summary="Current user")
def me(current: UserOut = Depends(auth_user)):
    return current


@app.get("/health", tags=["meta"], summary="Health check")
def health():
    return {"status": "ok", "similar_cases": case_retriever.is_available}
