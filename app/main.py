import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import init_models, dispose_engine
from app.exception import InternalErrorException
from app.friends.router import router as friends_router
from app.messages.push import push_registry
from app.messages.router import router as messages_router, ws_router
from app.posts.router import router as posts_router
from app.users.router import router as user_router

logger.remove()
logger.add(sys.stderr, level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Сервер запускается...")
    if settings.CREATE_TABLES:
        await init_models()

    yield
    logger.info("Сервер остановлен...")
    await push_registry.close()
    await dispose_engine()


app = FastAPI(lifespan=lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    message = error.get("msg", "Invalid input")
    detail = f"{field}: {message}" if field else message
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.opt(exception=exc).error(f"Database error on {request.method} {request.url.path}")
    error = InternalErrorException()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


app.include_router(user_router, prefix="/api")
app.include_router(friends_router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(messages_router, prefix="/api")
app.include_router(ws_router)


if __name__ == "__main__":
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
