"""
Vercel serverless function: POST /api/signup — records beta signups (email + optional phone).
Requires: DATABASE_URL (Postgres connection string)
"""
import json
import os
import sys
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, create_engine, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.pool import NullPool
from sqlalchemy.schema import CreateTable

from api.security import EMAIL_MAX_LENGTH, PHONE_MAX_LENGTH, clean_phone, validate_email

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

metadata = MetaData()

beta_signups = Table(
    "beta_signups",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(EMAIL_MAX_LENGTH), unique=True, nullable=False),
    Column("phone", String(PHONE_MAX_LENGTH)),
    Column("created_at", DateTime, server_default=func.now()),
)

# on_conflict_do_update lives on the dialect-specific insert constructs
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass
class SignupRequest:
    email: str | None = None
    phone: str | None = None

    @classmethod
    def from_json(cls, data) -> "SignupRequest":
        if not isinstance(data, dict):
            return cls()
        return cls(email=validate_email(data.get("email")), phone=clean_phone(data.get("phone")))


def parse_body(raw: bytes) -> dict | None:
    """Decode a JSON request body. Empty body is {}; undecodable body is None."""
    if not raw:
        return {}
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


def get_engine(database_url: str):
    if not database_url:
        return None
    # pin psycopg2; a bare postgresql:// picks the dialect default driver
    for scheme in ("postgres://", "postgresql://"):
        if database_url.startswith(scheme):
            database_url = "postgresql+psycopg2://" + database_url[len(scheme):]
            break
    return create_engine(database_url, poolclass=NullPool)


def build_upsert(dialect_name: str, email: str, phone: str | None):
    """INSERT ... ON CONFLICT (email) DO UPDATE, keeping the stored phone when the new one is null."""
    stmt = _UPSERT_INSERTS[dialect_name](beta_signups).values(email=email, phone=phone)
    return stmt.on_conflict_do_update(
        index_elements=[beta_signups.c.email],
        set_={
            "phone": func.coalesce(stmt.excluded.phone, beta_signups.c.phone),
            "created_at": func.now(),
        },
    )


def save_signup(database_url: str, signup: SignupRequest) -> None:
    if signup.phone is not None and len(signup.phone) > PHONE_MAX_LENGTH:
        raise ValueError(f"phone is longer than {PHONE_MAX_LENGTH} characters")
    engine = get_engine(database_url)
    if engine is None:
        raise RuntimeError("DATABASE_URL is not set")
    try:
        with engine.connect() as conn:
            conn.execute(CreateTable(beta_signups, if_not_exists=True))
            conn.commit()
            conn.execute(build_upsert(engine.dialect.name, signup.email, signup.phone))
            conn.commit()
    finally:
        engine.dispose()


def handle(method: str, data) -> tuple[int, dict | None]:
    """Route a request to (status, JSON body). A None body means an empty response."""
    if method == "OPTIONS":
        return 200, None
    if method != "POST":
        return 405, {"error": "Method not allowed"}

    signup = SignupRequest.from_json(data)
    if not signup.email:
        return 400, {"error": "Valid email is required"}

    try:
        save_signup(os.environ.get("DATABASE_URL", ""), signup)
    except Exception as e:
        print(f"[api/signup] Database error: {type(e).__name__}: {e}", file=sys.stderr)
        return 500, {"error": "Failed to save signup"}

    return 200, {"success": True, "message": "Successfully signed up!"}


class handler(BaseHTTPRequestHandler):
    def do_POST(self):
        try:
            content_len = int(self.headers.get("Content-Length", 0))
        except ValueError:
            content_len = 0
        raw = self.rfile.read(content_len) if content_len > 0 else b""
        self._send(*handle("POST", parse_body(raw)))

    def do_OPTIONS(self):
        self._send(*handle("OPTIONS", None))

    def do_GET(self):
        self._send(*handle(self.command, None))

    def __getattr__(self, name):
        # every other verb (HEAD, PUT, DELETE, ...) gets the same 405 as GET
        if name.startswith("do_"):
            return self.do_GET
        raise AttributeError(name)

    def _send(self, status, body):
        self.send_response(status)
        for name, value in CORS_HEADERS.items():
            self.send_header(name, value)
        if body is None:
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        payload = json.dumps(body).encode("utf-8")
        self.send_header("Content-type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)
