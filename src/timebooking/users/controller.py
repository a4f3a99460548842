from __future__ import annotations

import logging
import secrets
from datetime import timedelta

from flask import Flask, jsonify, make_response, request, session

from ..common.validators import require_int, require_payload
from ..common.web import admin_required, domain_error_response, error_response, login_required
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.exceptions import DomainError, NotFoundError
from ..container import Container
from .service import SessionUser

logger = logging.getLogger(__name__)


def _session_user() -> SessionUser:
    return SessionUser(
        user_id=int(session["user_id"]),
        uid=session["uid"],
        person_id=session.get("person_id"),
        groups=tuple(session.get("groups", [])),
    )


def _start_session(s_user: SessionUser, *, remember: bool) -> None:
    session.clear()
    session.permanent = remember
    session["user_id"] = s_user.user_id
    session["uid"] = s_user.uid
    session["person_id"] = s_user.person_id
    session["groups"] = list(s_user.groups)
    session["sid"] = secrets.token_hex(16)


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    def auth_data():
        """Auth payload for the current session user."""
        user_id = int(session["user_id"])
        try:
            user, person = container.auth_service.resolve_user_person(user_id)
        except NotFoundError:
            return error_response(f"Cannot resolve person profile of user {user_id}", 500)
        return jsonify(
            {
                "id": user.user_id,
                "personId": person.person_id,
                "userId": user.uid,
                "groups": list(user.groups),
                "session": session.get("sid"),
            }
        ), 200

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        try:
            data = require_payload(request.get_json(silent=True), "login")
            s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        except DomainError as e:
            return domain_error_response(e)
        _start_session(s_user, remember=bool(data.get("rememberMe")))
        return auth_data()

    @app.route("/register", methods=["POST"], endpoint="register")
    def register_user():
        username = None
        try:
            data = require_payload(request.get_json(silent=True), "register user")
            username = data.get("username", "")
            s_user = container.auth_service.register(
                uid=username,
                password=data.get("password", ""),
                forename=data.get("forename", ""),
                surname=data.get("surname", ""),
            )
        except DomainError as e:
            logger.info("Cannot register user %s: %s", username, e)
            return domain_error_response(e)
        _start_session(s_user, remember=False)
        return auth_data()

    @app.route("/auth", methods=["GET"], endpoint="send_auth_data")
    def send_auth_data():
        if "user_id" not in session:
            return error_response("No active session found.", 500)
        return auth_data()

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        if "user_id" not in session:
            return error_response("No active session found.", 500)

        logger.info("Session %s closed. User %s logged out.", session.get("sid"), session.get("uid"))
        session.clear()
        response = make_response("Logged out", 200)
        response.delete_cookie(app.config.get("SESSION_COOKIE_NAME", "session"))
        return response

    @app.route("/users/<uid>/exists", methods=["GET"], endpoint="check_username_exists")
    def check_username_exists(uid: str):
        logger.info("Testing if user with id %s already exist.", uid)
        try:
            exists = container.user_service.username_exists(uid)
        except DomainError as e:
            return domain_error_response(e)
        return jsonify({"userExist": exists}), 200

    @app.route("/groups", methods=["GET"], endpoint="list_groups")
    @login_required
    def list_groups():
        logger.info("Retrieving a list of current groups")
        return jsonify([g.to_dict() for g in container.user_service.list_groups()]), 200

    @app.route("/users", methods=["GET"], endpoint="list_users")
    @admin_required
    def list_users():
        logger.info("Retrieving a list of current users")
        try:
            return jsonify(container.user_service.list_users()), 200
        except DomainError as e:
            return domain_error_response(e)

    @app.route("/users/<uid>", methods=["PUT"], endpoint="update_user")
    @login_required
    def update_user(uid: str):
        logger.info("Updating user %s", uid)
        try:
            data = require_payload(request.get_json(silent=True), "update user")
            updated = container.user_service.update_user(current=_session_user(), uid=uid, data=dict(data))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify(updated), 200

    @app.route("/users/<uid>/password", methods=["PUT"], endpoint="change_user_password")
    @login_required
    def change_user_password(uid: str):
        logger.info("Changing the password of user %s", uid)
        try:
            data = require_payload(request.get_json(silent=True), "change password")
            success = container.user_service.change_password(
                current=_session_user(),
                uid=uid,
                old_password=data.get("oldPassword", ""),
                new_password=data.get("newPassword", ""),
            )
        except DomainError as e:
            return domain_error_response(e)
        return jsonify({"success": success}), 200

    @app.route("/users/<uid>/password/reset", methods=["POST"], endpoint="reset_user_password")
    @admin_required
    def reset_user_password(uid: str):
        logger.info("Resetting the password of user %s", uid)
        try:
            new_password = container.user_service.reset_password(uid)
        except DomainError as e:
            return domain_error_response(e)
        return jsonify({"resettedPassword": new_password}), 200

    @app.route("/users/<uid>/groups/<group_id>", methods=["PUT"], endpoint="change_user_group")
    @admin_required
    def change_user_group(uid: str, group_id: str):
        logger.info("Changing the group of user %s to %s", uid, group_id)
        try:
            result = container.user_service.change_group(uid, require_int(group_id, "groupId"))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify(result), 200
