from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import arg_int, current_principal, json_body, json_view, login_required, roles_required, to_int
from ..core.enums import Role, ScopeView
from ..core.exceptions import ValidationError
from ..container import Container


def _user_to_dict(u) -> dict:
    return {
        "user_id": u.user_id,
        "name": u.name,
        "email": u.email,
        "role": u.role.value,
        "branch_id": u.branch_id,
        "group_id": u.group_id,
        "is_active": u.is_active,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="api_login")
    @json_view
    def login():
        data = request.get_json(silent=True) or request.form
        principal = container.auth_service.verify(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        session.update(principal.to_session())
        return jsonify({"success": True, "user": principal.to_session()})

    @app.route("/api/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return jsonify({"success": True, "message": "Đã đăng xuất"})

    @app.route("/api/me", methods=["GET"], endpoint="api_me")
    @login_required
    def me():
        return jsonify({"success": True, "user": current_principal().to_session()})

    @app.route("/api/users", methods=["GET"], endpoint="api_users")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def list_users():
        users = container.user_service.list_visible(current_principal(), group_id=arg_int("group_id"))
        return jsonify({"success": True, "users": [_user_to_dict(u) for u in users]})

    @app.route("/api/users", methods=["POST"], endpoint="api_create_user")
    @roles_required(Role.ADMIN, Role.MANAGER)
    @json_view
    def create_user():
        data = json_body()
        try:
            role = Role(data.get("role", Role.EMPLOYEE.value))
        except ValueError:
            raise ValidationError("Vai trò không hợp lệ") from None
        user_id = container.user_service.create_account(
            current_principal(),
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=role,
            branch_id=to_int(data.get("branch_id"), "branch_id"),
            group_id=to_int(data.get("group_id"), "group_id"),
        )
        return jsonify({"success": True, "user_id": user_id}), 201

    @app.route("/api/branches", methods=["GET"], endpoint="api_branches")
    @login_required
    @json_view
    def list_branches():
        predicate = container.scope.resolve(current_principal(), ScopeView.PERFORMANCE)
        branches = container.organization_repo.list_branches(predicate)
        return jsonify(
            {
                "success": True,
                "branches": [{"branch_id": b.branch_id, "name": b.name, "code": b.code} for b in branches],
            }
        )

    @app.route("/api/groups", methods=["GET"], endpoint="api_groups")
    @login_required
    @json_view
    def list_groups():
        predicate = container.scope.resolve(current_principal(), ScopeView.PERFORMANCE)
        groups = container.organization_repo.list_groups(predicate, branch_id=arg_int("branch_id"))
        return jsonify(
            {
                "success": True,
                "groups": [
                    {"group_id": g.group_id, "branch_id": g.branch_id, "name": g.name, "manager_id": g.manager_id}
                    for g in groups
                ],
            }
        )
