from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/<int:employee_id>/<shift_date>", methods=["GET"], endpoint="attendance_record")
    def attendance_record(employee_id: int, shift_date: str):
        try:
            day = parse_iso_date(shift_date)
        except ValueError:
            return jsonify({"success": False, "message": "shift_date must be YYYY-MM-DD"}), 400

        employee = container.directory_repo.get_employee(employee_id)
        if employee is None:
            return jsonify({"success": False, "message": "employee not found"}), 404

        records = container.attendance_repo.list_for_employee_date(employee_id, day)
        if not records:
            return jsonify({"success": False, "message": "record not found"}), 404
        return jsonify(
            {
                "success": True,
                "employee": {"employee_id": employee.employee_id, "full_name": employee.full_name},
                "records": [r.to_dict() for r in records],
            }
        )
