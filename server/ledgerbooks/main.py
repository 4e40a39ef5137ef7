import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .routers import banking, bills, chart_of_accounts, contacts, health, invoices, journals, reports, vat

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(chart_of_accounts.router)
app.include_router(contacts.router)
app.include_router(journals.router)
app.include_router(invoices.router)
app.include_router(bills.router)
app.include_router(banking.router)
app.include_router(reports.router)
app.include_router(vat.router)


@app.get("/")
def root():
    return {"status": "ok"}
