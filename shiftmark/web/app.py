from __future__ import annotations

import zipfile
from io import BytesIO

from flask import Flask, Response, jsonify, request, send_file
from werkzeug.datastructures import FileStorage

from .. import __version__
from ..config.loader import AppConfig
from ..excel.reader import XLSX_MIME_TYPE
from ..models.processing_result import ProcessingResult, Upload
from ..services.orchestrator import ProcessingError, process_all
from ..services.punch_index import MissingColumnsError

"""HTTP surface.

POST /process (multipart/form-data)
    logReport   one .xlsx attendance log
    deptSheets  1..max_roster_files .xlsx rosters
    -> the first annotated roster as ``updated_<name>``
       (``?bundle=zip`` -> every annotated roster in one zip)
GET /health
"""

LOG_FIELD = "logReport"
ROSTER_FIELD = "deptSheets"
BUNDLE_NAME = "updated_rosters.zip"


def _to_upload(storage: FileStorage) -> Upload:
    return Upload(filename=storage.filename or "", content=storage.read())


def _text(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def _bundle(result: ProcessingResult) -> BytesIO:
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for f in result.files:
            zf.writestr(f.filename, f.content)
    buffer.seek(0)
    return buffer


def create_app(config: AppConfig | None = None) -> Flask:
    """Application factory."""
    cfg = config or AppConfig()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = cfg.max_content_length
    app.config["SHIFTMARK"] = cfg

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "version": __version__})

    @app.route("/process", methods=["POST"])
    def process():
        log_files = request.files.getlist(LOG_FIELD)
        log_upload = _to_upload(log_files[0]) if log_files else None
        rosters = [_to_upload(f) for f in request.files.getlist(ROSTER_FIELD)]

        try:
            result = process_all(log_upload, rosters, cfg)
        except MissingColumnsError:
            return _text("Missing required columns in log report", 400)
        except ProcessingError as e:
            return _text(f"Error processing files: {e}", 500)

        if request.args.get("bundle") == "zip":
            return send_file(
                _bundle(result),
                as_attachment=True,
                download_name=BUNDLE_NAME,
                mimetype="application/zip",
            )

        # 既定では先頭のロスターのみ返す
        primary = result.primary
        return send_file(
            BytesIO(primary.content),
            as_attachment=True,
            download_name=primary.filename,
            mimetype=XLSX_MIME_TYPE,
        )

    return app
