from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.web import error_response, login_required
from ..core.constants import STATISTICS_ERROR_MESSAGE
from ..core.exceptions import AggregationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/statistics/bookings", methods=["GET"], endpoint="calculate_booking_statistic")
    @login_required
    def calculate_booking_statistic():
        try:
            result = container.statistics_service.calculate()
        except AggregationError as e:
            logger.warning("Booking statistics failed: %s", e)
            return error_response(STATISTICS_ERROR_MESSAGE, 500)
        except Exception:
            logger.exception("Unexpected error while calculating booking statistics")
            return error_response(STATISTICS_ERROR_MESSAGE, 500)
        return jsonify(result.to_dict()), 200
