from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError
from pollgate.db.database import engine, Base
from pollgate.api.endpoints import admin, auth, csrf, polls

from pollgate.core.errors import GateError
from pollgate.core.exception import (
    gate_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    database_exception_handler,
    general_exception_handler
)
from pollgate.core.constants import APIConfig
from pollgate.core.logging_config import configure_logging
from pollgate.core.middleware import security_headers_middleware

# Import models to register them with SQLAlchemy
from pollgate.models import user, polls as poll_models  # noqa: F401

configure_logging()

# Create all tables in the database
Base.metadata.create_all(bind=engine)

# Create FastAPI app with centralized configuration
app = FastAPI(
    title=APIConfig.API_TITLE,
    description=APIConfig.API_DESCRIPTION,
    version=APIConfig.API_VERSION
)

# Credentials are allowed so the session and CSRF cookies travel with requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=APIConfig.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.middleware("http")(security_headers_middleware)

# Register exception handlers
app.add_exception_handler(GateError, gate_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers with centralized prefix
app.include_router(csrf.router, prefix=APIConfig.API_PREFIX)
app.include_router(auth.router, prefix=APIConfig.API_PREFIX)
app.include_router(polls.router, prefix=APIConfig.API_PREFIX)
app.include_router(admin.router, prefix=APIConfig.API_PREFIX)


@app.get("/")
def read_root():
    return {"message": "Welcome to the Pollgate API!"}
