from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import recent_periods
from ..common.http import arg_int, current_principal, json_body, json_view, login_required, roles_required, to_int
from ..core.constants import PERIOD_OPTIONS_COUNT
from ..core.enums import BatchField, Role
from ..core.exceptions import ValidationError
from ..container import Container
from .inputs import parse_weights
from .service import records_for_display


def _group_to_dict(group) -> dict | None:
    if group is None:
        return None
    return {"group_id": group.group_id, "branch_id": group.branch_id, "name": group.name}


def _require_group_id(data: dict) -> int:
    group_id = to_int(data.get("group_id"), "group_id")
    if group_id is None:
        raise ValidationError("Vui lòng chọn nhóm và kỳ đánh giá")
    return group_id


def _batch_field(raw) -> BatchField:
    try:
        return BatchField(raw)
    except ValueError:
        raise ValidationError(f"Trường áp dụng hàng loạt không hợp lệ: {raw}") from None


def register(app: Flask, container: Container) -> None:
    @app.route("/api/performance/periods", methods=["GET"], endpoint="api_performance_periods")
    @login_required
    def periods():
        return jsonify({"success": True, "periods": recent_periods(PERIOD_OPTIONS_COUNT)})

    @app.route("/api/performance", methods=["GET"], endpoint="api_performance")
    @login_required
    @json_view
    def list_records():
        views = container.performance_service.list_records(
            current_principal(),
            period=request.args.get("period") or None,
            branch_id=arg_int("branch_id"),
            group_id=arg_int("group_id"),
        )
        return jsonify({"success": True, "records": records_for_display(views)})

    @app.route("/api/performance/<int:record_id>", methods=["GET"], endpoint="api_performance_detail")
    @login_required
    @json_view
    def record_detail(record_id: int):
        view = container.performance_service.get_record(current_principal(), record_id)
        return jsonify({"success": True, "record": records_for_display([view])[0]})

    @app.route("/api/performance/<int:record_id>", methods=["PATCH"], endpoint="api_performance_edit")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def edit_record(record_id: int):
        view = container.performance_service.edit_record(current_principal(), record_id, json_body())
        return jsonify({"success": True, "record": records_for_display([view])[0]})

    @app.route("/api/performance/<int:record_id>", methods=["DELETE"], endpoint="api_performance_delete")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def delete_record(record_id: int):
        container.performance_service.delete_record(current_principal(), record_id)
        return jsonify({"success": True, "message": "Đã xóa bản ghi"})

    @app.route("/api/performance/<int:record_id>/refresh-qc", methods=["POST"], endpoint="api_performance_refresh_qc")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def refresh_qc(record_id: int):
        view = container.performance_service.refresh_qc(current_principal(), record_id)
        return jsonify({"success": True, "record": records_for_display([view])[0]})

    @app.route("/api/dashboard", methods=["GET"], endpoint="api_dashboard")
    @login_required
    @json_view
    def dashboard():
        stats = container.performance_service.dashboard(current_principal())
        return jsonify(
            {
                "success": True,
                "total_branches": stats.total_branches,
                "total_groups": stats.total_groups,
                "total_employees": stats.total_employees,
                "avg_score": stats.avg_score,
            }
        )

    # Generation is stateless over HTTP: the client keeps the roster and
    # sends it back with every preview/commit.

    @app.route("/api/performance/generation/roster", methods=["POST"], endpoint="api_generation_roster")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def generation_roster():
        data = json_body()
        principal = current_principal()
        gen = container.generation_service
        session = gen.open_session(
            principal,
            period=data.get("period", ""),
            branch_id=to_int(data.get("branch_id"), "branch_id"),
            weights=parse_weights(data.get("weights")),
        )
        gen.load_roster(principal, session, _require_group_id(data))
        return jsonify(
            {
                "success": True,
                "period": session.period,
                "group": _group_to_dict(session.group),
                "rows": [r.to_dict() for r in session.rows.values()],
            }
        )

    @app.route("/api/performance/generation/preview", methods=["POST"], endpoint="api_generation_preview")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def generation_preview():
        data = json_body()
        gen = container.generation_service
        session = gen.restore_session(
            current_principal(),
            period=data.get("period", ""),
            group_id=_require_group_id(data),
            rows=data.get("rows") or [],
            weights=parse_weights(data.get("weights")),
        )
        if "select_all" in data:
            session.select_all(bool(data["select_all"]))
        touched = 0
        for item in data.get("batch") or []:
            touched += session.apply_batch(_batch_field(item.get("field")), item.get("value"))

        preview = gen.preview(session)
        rows = []
        for p in preview:
            row = p.row.to_dict()
            row["score"] = round(p.score, 2)
            row["level"] = p.level
            rows.append(row)
        return jsonify({"success": True, "batch_rows_touched": touched, "rows": rows})

    @app.route("/api/performance/generation/commit", methods=["POST"], endpoint="api_generation_commit")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def generation_commit():
        data = json_body()
        principal = current_principal()
        gen = container.generation_service
        session = gen.restore_session(
            principal,
            period=data.get("period", ""),
            group_id=_require_group_id(data),
            rows=data.get("rows") or [],
            weights=parse_weights(data.get("weights")),
        )
        result = gen.commit(principal, session)
        payload = result.to_dict()
        payload["message"] = f"Đã lưu {result.success} bản ghi, thất bại {result.failed}"
        return jsonify(payload)
