from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .errors import NotFoundError, PartialReconciliationError, StoreError, ValidationError
from .log import configure_logging
from .routers import summary, themes, transactions, wallets

settings = Settings()
configure_logging(settings)

app = FastAPI(title=settings.app_name)

# CORS: allow web origin for dev
allowed_origins = {str(settings.app_url), "http://localhost:5173", "http://127.0.0.1:5173"}
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_error(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error(request: Request, exc: StoreError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(PartialReconciliationError)
async def partial_reconciliation_error(request: Request, exc: PartialReconciliationError):
    # Balances may now disagree with the transaction list; the client should warn
    return JSONResponse(status_code=500, content=exc.to_dict())


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": settings.app_name,
        "env": settings.app_env,
    }

# Routers
app.include_router(wallets.router)
app.include_router(themes.router)
app.include_router(transactions.router)
app.include_router(summary.router)
