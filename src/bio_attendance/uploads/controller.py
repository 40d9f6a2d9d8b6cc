from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import BatchReadError, ValidationError
from ..container import Container
from .model import BatchRequest

logger = logging.getLogger(__name__)


def _optional_date(field_name: str):
    raw = (request.form.get(field_name) or "").strip()
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD") from None


def _optional_int(field_name: str) -> Optional[int]:
    raw = (request.form.get(field_name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{field_name} must be an integer") from None


def register(app: Flask, container: Container) -> None:
    @app.route("/biometric/uploads", methods=["POST"], endpoint="biometric_upload")
    def biometric_upload():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return jsonify({"success": False, "message": "file is required"}), 400

        try:
            batch_request = BatchRequest(
                biometric_site_id=_optional_int("biometric_site_id"),
                date_from=_optional_date("date_from"),
                date_to=_optional_date("date_to"),
                shift_date=_optional_date("shift_date"),
            )
            result = container.batch_processor.process_content(upload.read(), batch_request)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except BatchReadError as e:
            logger.error("Biometric upload %s rejected: %s", upload.filename, e)
            return jsonify({"success": False, "message": str(e)}), 422

        return jsonify({"success": True, "result": result.to_dict()})
