from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import admin_required, current_user_id, domain_error_response, login_required
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/bookings/mine", methods=["GET"], endpoint="list_user_bookings")
    @login_required
    def list_user_bookings():
        bookings = container.booking_service.list_user_bookings(current_user_id())
        return jsonify([b.to_dict() for b in bookings]), 200

    @app.route("/bookings", methods=["GET"], endpoint="list_bookings")
    @admin_required
    def list_bookings():
        try:
            page = container.booking_service.list_bookings(
                offset=request.args.get("offset"),
                limit=request.args.get("limit"),
            )
        except DomainError as e:
            return domain_error_response(e)
        return jsonify(page.to_dict()), 200

    @app.route("/bookings", methods=["POST"], endpoint="create_booking")
    @login_required
    def create_booking():
        try:
            booking = container.booking_service.create_booking(
                user_id=current_user_id(),
                person_id=session.get("person_id"),
                data=request.get_json(silent=True),
            )
        except DomainError as e:
            return domain_error_response(e)
        return jsonify(booking.to_dict()), 201

    @app.route("/bookings/<booking_id>", methods=["PUT"], endpoint="save_booking")
    @login_required
    def save_booking(booking_id: str):
        try:
            booking = container.booking_service.save_booking(
                user_id=current_user_id(),
                booking_id=booking_id,
                data=request.get_json(silent=True),
            )
        except DomainError as e:
            return domain_error_response(e)
        return jsonify(booking.to_dict()), 200

    @app.route("/bookings/<booking_id>", methods=["DELETE"], endpoint="delete_booking")
    @login_required
    def delete_booking(booking_id: str):
        try:
            result = container.booking_service.delete_booking(user_id=current_user_id(), booking_id=booking_id)
        except DomainError as e:
            return domain_error_response(e)
        return jsonify(result), 200
