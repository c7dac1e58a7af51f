# app.py - Flask trigger for the discount engine
from functools import wraps
import hmac
import logging

from flask import Flask, current_app, jsonify, request

from campaign_engine.core.config import Config
from campaign_engine.core.exceptions import EngineBusyError
from campaign_engine.core.logging import setup_logging
from campaign_engine.services import DatabaseService, DiscountEngine, RunLock

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def token_required(f):
    """Decorator requiring the scheduler's bearer token when auth is enabled."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_app.config["AUTH_ENABLED"]:
            return f(*args, **kwargs)

        secret = current_app.config["CRON_SECRET"]
        header = request.headers.get("Authorization", "")
        if secret and hmac.compare_digest(header, f"Bearer {secret}"):
            return f(*args, **kwargs)

        logger.warning(f"Unauthorized engine trigger from {request.remote_addr}")
        return jsonify({"error": "Unauthorized"}), 401
    return decorated_function


def get_engine() -> DiscountEngine:
    return current_app.extensions["discount_engine"]


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------

def create_app(db_service: DatabaseService = None, run_lock: RunLock = None,
               config_overrides: dict = None) -> Flask:
    """
    Build the trigger app.

    Args:
        db_service: Database to run against (defaults to DATABASE_URL)
        run_lock: Lock serializing runs (defaults to ENGINE_LOCK_BACKEND)
        config_overrides: Extra Flask config, applied last
    """
    app = Flask(__name__)
    app.config.update(Config.get_flask_config())
    if config_overrides:
        app.config.update(config_overrides)

    db_service = db_service or DatabaseService()
    app.extensions["discount_engine"] = DiscountEngine(db_service, run_lock=run_lock)

    register_routes(app)
    return app


def register_routes(app: Flask):

    @app.route("/ping")
    def ping():
        """Health check endpoint."""
        return jsonify({"status": "pong", "env": Config.app.ENV})

    @app.route("/internal/discount-engine/run", methods=["POST"])
    @token_required
    def run_engine():
        """Run the engine and return the full summary."""
        try:
            summary = get_engine().run()
        except EngineBusyError as e:
            return jsonify(e.to_dict()), 409
        except Exception:
            logger.exception("Discount engine error")
            return jsonify({"error": "Failed to run discount engine"}), 500

        return jsonify({**summary.to_dict(), "message": summary.message()})

    @app.route("/internal/discount-engine/cron", methods=["GET"])
    @token_required
    def cron_run():
        """Scheduled run; responds with counts only."""
        try:
            summary = get_engine().run()
        except EngineBusyError as e:
            return jsonify(e.to_dict()), 409
        except Exception:
            logger.exception("[Cron] Discount engine error")
            return jsonify({"error": "Failed to run discount engine"}), 500

        logger.info(
            f"[Cron] Discount engine completed: rules={summary.rules_processed} "
            f"updated={summary.items_updated} cleared={summary.items_cleared} "
            f"errors={len(summary.errors)}"
        )
        body = summary.to_dict()
        return jsonify({key: body[key] for key in ("success", "rulesProcessed", "itemsUpdated", "itemsCleared")})

    @app.route("/internal/discount-engine/expired", methods=["DELETE"])
    @token_required
    def clear_expired():
        """Clear ended campaign prices without evaluating rules."""
        try:
            cleared = get_engine().clear_expired()
        except EngineBusyError as e:
            return jsonify(e.to_dict()), 409
        except Exception:
            logger.exception("Clear expired campaigns error")
            return jsonify({"error": "Failed to clear expired campaigns"}), 500

        return jsonify({
            "success": True,
            "message": f"Cleared {cleared} expired campaign prices",
            "clearedCount": cleared,
        })


def main():
    """Development server entry point."""
    Config.initialize()
    setup_logging(verbose=Config.app.VERBOSE, level=Config.app.LOG_LEVEL)
    logger.info(Config.summary())
    create_app().run(debug=Config.app.DEBUG)


if __name__ == "__main__":
    main()
