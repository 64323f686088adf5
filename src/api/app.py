"""
Flask application exposing the pipeline over HTTP.

    POST /api/v0/prices   ZIP upload (multipart field "file" or raw body) -> JSON stats
    GET  /api/v0/prices   -> application/zip with data.csv

The store is injected through `create_app`; the app never opens or closes it.
"""

from __future__ import annotations

import io
from typing import Optional, Tuple

from flask import Flask, Response, jsonify, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

from src.config import Settings, get_settings
from src.errors import PriceArchiveError
from src.pipeline.abstract import RecordStore
from src.pipeline.export import export_archive
from src.pipeline.ingest import ingest_archive
from src.utils.logging import get_logger

log = get_logger(__name__)

PRICES_ROUTE = "/api/v0/prices"
UPLOAD_FIELD = "file"


def _read_upload() -> bytes:
    """Archive bytes from the multipart `file` field, else the raw request body."""
    if request.mimetype == "multipart/form-data":
        upload = request.files.get(UPLOAD_FIELD)
        return upload.read() if upload is not None else b""
    # Any other content type (curl --data-binary sends form-urlencoded) is taken raw.
    return request.get_data(cache=False)


def create_app(store: RecordStore, settings: Optional[Settings] = None) -> Flask:
    """
    Build the Flask app bound to `store`.

    Parameters
    ----------
    store : RecordStore
        Opened store client shared by all requests.
    settings : Settings | None
        Upload limit and archive naming; defaults to the cached settings.
    """
    settings = settings or get_settings()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes

    @app.errorhandler(PriceArchiveError)
    def handle_pipeline_error(exc: PriceArchiveError) -> Tuple[Response, int]:
        if exc.status_code >= 500:
            log.error("Request failed", extra={"error": exc.message, "path": request.path})
        return Response(exc.message, mimetype="text/plain"), exc.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(exc: RequestEntityTooLarge) -> Tuple[Response, int]:
        del exc
        return (
            Response(f"archive exceeds {settings.max_upload_bytes} bytes", mimetype="text/plain"),
            413,
        )

    @app.post(PRICES_ROUTE)
    def upload_prices():
        data = _read_upload()
        stats = ingest_archive(data, store, settings)
        return jsonify(stats.as_response())

    @app.get(PRICES_ROUTE)
    def download_prices():
        archive = export_archive(store, settings)
        return send_file(
            io.BytesIO(archive),
            mimetype="application/zip",
            as_attachment=True,
            download_name=settings.export_archive_name,
        )

    return app


__all__ = ["PRICES_ROUTE", "create_app"]
