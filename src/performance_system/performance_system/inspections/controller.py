from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import arg_date, arg_int, current_principal, json_view, login_required, roles_required, to_int
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def _inspection_to_dict(r) -> dict:
    return {
        "inspection_id": r.inspection_id,
        "user_id": r.user_id,
        "employee_name": r.employee_name or "-",
        "branch_id": r.branch_id,
        "group_id": r.group_id,
        "inspection_date": r.inspection_date.isoformat(),
        "topic": r.topic,
        "batch_name": r.batch_name,
        "inspected_count": r.inspected_count,
        "error_count": r.error_count,
        "created_at": r.created_at.isoformat(sep=" ") if r.created_at else None,
    }


def _filters() -> dict:
    return {
        "start": arg_date("start"),
        "end": arg_date("end"),
        "branch_id": arg_int("branch_id"),
        "group_id": arg_int("group_id"),
        "user_id": arg_int("user_id"),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/inspections/import", methods=["POST"], endpoint="api_import_inspections")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def import_inspections():
        principal = current_principal()
        upload = request.files.get("file")
        if upload is not None and upload.filename:
            branch_id = to_int(request.form.get("branch_id"), "branch_id")
            if branch_id is None:
                raise ValidationError("Vui lòng chọn chi nhánh")
            result = container.import_service.import_file(
                principal,
                branch_id=branch_id,
                filename=upload.filename,
                content=upload.read(),
            )
        else:
            data = request.get_json(silent=True) or {}
            text = data.get("text") or ""
            if not text.strip():
                raise ValidationError("Vui lòng tải lên tệp hoặc dán dữ liệu")
            branch_id = to_int(data.get("branch_id"), "branch_id")
            if branch_id is None:
                raise ValidationError("Vui lòng chọn chi nhánh")
            result = container.import_service.import_text(principal, branch_id=branch_id, text=text)

        payload = result.to_dict()
        payload["message"] = f"Nhập thành công {result.success} bản ghi, thất bại {result.failed}"
        return jsonify(payload)

    @app.route("/api/inspections", methods=["GET"], endpoint="api_inspections")
    @login_required
    @json_view
    def list_inspections():
        rows = container.inspection_query_service.list_inspections(current_principal(), **_filters())
        return jsonify({"success": True, "inspections": [_inspection_to_dict(r) for r in rows]})

    @app.route("/api/inspections/recent", methods=["GET"], endpoint="api_recent_inspections")
    @login_required
    @json_view
    def recent_inspections():
        limit = arg_int("limit")
        principal = current_principal()
        if limit is None:
            rows = container.inspection_query_service.recent_imports(principal)
        else:
            rows = container.inspection_query_service.recent_imports(principal, limit=max(1, limit))
        return jsonify({"success": True, "inspections": [_inspection_to_dict(r) for r in rows]})

    @app.route("/api/inspections/accuracy", methods=["GET"], endpoint="api_inspection_accuracy")
    @login_required
    @json_view
    def accuracy():
        rows = container.inspection_query_service.accuracy_summary(current_principal(), **_filters())
        return jsonify(
            {
                "success": True,
                "rows": [
                    {
                        "user_id": r.user_id,
                        "employee_name": r.employee_name,
                        "inspected": r.inspected,
                        "errors": r.errors,
                        "accuracy": round(r.accuracy, 2),
                        "meets_threshold": r.meets_threshold,
                    }
                    for r in rows
                ],
            }
        )
