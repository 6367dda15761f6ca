from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from staffquiz.model import users, quizzes, questions, attempts  # noqa: F401  registers the tables
from staffquiz.router import (
    auth_router,
    users_router,
    admin_router,
)
from staffquiz.config import settings


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.API_VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",  # For local development
        "http://localhost:5173",  # For Vite development
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
app.include_router(users_router, prefix="/users", tags=["Employee"])
app.include_router(admin_router, prefix="/admin", tags=["Admin"])

#####################
### Root Endpoint ###
#####################
@app.get("/")
def read_root():
    return {"Project": settings.PROJECT_NAME, "Environment": settings.ENV, "Version": settings.API_VERSION, "Docs": "/docs"}
