"""
Local dev server for the beta signup API route.
Set env: DATABASE_URL (Postgres connection string).
Run: python server.py  →  POST http://127.0.0.1:5001/api/signup
"""
import os
import pathlib

from dotenv import load_dotenv

load_dotenv(dotenv_path=pathlib.Path(__file__).resolve().parent / ".env")

from flask import Flask, Response, jsonify, request

# Import API logic from Vercel functions
from api.signup import CORS_HEADERS, handle, parse_body

app = Flask(__name__, static_folder=None)


# ── Security headers ──

@app.after_request
def add_security_headers(response):
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = "camera=(), geolocation=(), payment=()"
    return response


# --- API routes ---

# OPTIONS is listed explicitly so Flask does not answer pre-flight itself
@app.route("/api/signup", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
def signup():
    data = parse_body(request.get_data()) if request.method == "POST" else None
    status, body = handle(request.method, data)
    if body is None:
        response = Response("", status=status)
    else:
        response = jsonify(body)
        response.status_code = status
    response.headers.update(CORS_HEADERS)
    return response


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5001))
    print(f"Signup API listening on http://127.0.0.1:{port}/api/signup")
    if not os.environ.get("DATABASE_URL"):
        print("WARNING: DATABASE_URL is empty; every signup will be answered with 500 until it is set.")
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "false").lower() == "true")
