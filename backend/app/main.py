# Estate CRM backend entrypoint: contact status lifecycle and timeline API.

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.core.errors import register_error_handlers
from backend.app.core.settings import get_settings
from backend.app.api import register
from backend.app.api import login
from backend.app.api import contacts
from backend.app.api import contact_links
from backend.app.api import properties

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

app = FastAPI(title=settings.app_name, version=settings.api_version)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(register.router)
app.include_router(login.router)
app.include_router(contacts.router)
app.include_router(contact_links.router)
app.include_router(properties.router)


@app.get("/")
def read_root():
    return {"app": "Estate CRM backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}
