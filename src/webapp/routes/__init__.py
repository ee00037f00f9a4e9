from flask import Flask

from webapp.routes.analyses import bp as analyses_bp
from webapp.routes.health import bp as health_bp


def register_blueprints(app: Flask) -> None:
    """Attach all blueprints to the Flask app."""
    app.register_blueprint(analyses_bp)
    app.register_blueprint(health_bp)
