from flask import Flask, jsonify
from flask_migrate import Migrate
from flask_login import LoginManager
from sqlalchemy.exc import OperationalError
from bargen.extensions import db
from bargen.config import Config
from bargen.errors import (
    AuthenticationRequired,
    BargenError,
    ServiceUnavailable,
)
from bargen.middleware import setup_auth_middleware, load_principal
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(Config.LOG_FILE),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

migrate = Migrate()
login_manager = LoginManager()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Callers identify with an opaque principal on every request; there is
    # no server-side login session.
    login_manager.request_loader(load_principal)

    @login_manager.unauthorized_handler
    def unauthorized():
        err = AuthenticationRequired()
        return jsonify(err.to_dict()), err.status_code

    # Register blueprints
    from bargen.blueprints import (
        account,
        bargains,
        blobs,
        cart,
        chat,
        delivery,
        products,
        shops,
        wishlist,
    )

    app.register_blueprint(account.bp, url_prefix='/')
    app.register_blueprint(shops.bp, url_prefix='/')
    app.register_blueprint(products.bp, url_prefix='/')
    app.register_blueprint(blobs.bp, url_prefix='/')
    app.register_blueprint(cart.bp, url_prefix='/')
    app.register_blueprint(bargains.bp, url_prefix='/')
    app.register_blueprint(chat.bp, url_prefix='/')
    app.register_blueprint(wishlist.bp, url_prefix='/')
    app.register_blueprint(delivery.bp, url_prefix='/')

    _register_error_handlers(app)

    # Site-wide rejection of anonymous mutations
    setup_auth_middleware(app)

    # Note: Database tables are managed via Flask-Migrate
    # Use 'flask db upgrade' to create/update tables

    logger.info("Bargen store initialized")
    return app


def _register_error_handlers(app):

    @app.errorhandler(BargenError)
    def handle_bargen_error(err):
        db.session.rollback()
        if err.status_code >= 500:
            logger.error("Request failed: %s", err.message)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(OperationalError)
    def handle_db_unavailable(err):
        db.session.rollback()
        logger.error("Database unavailable: %s", err, exc_info=True)
        unavailable = ServiceUnavailable(
            'Service not available: storage is not ready')
        return jsonify(unavailable.to_dict()), unavailable.status_code

    @app.errorhandler(404)
    def handle_unknown_route(err):
        return jsonify({'error': 'Endpoint not found', 'kind': 'not_found'}), 404

    @app.errorhandler(405)
    def handle_bad_method(err):
        return jsonify({
            'error': 'Method not allowed',
            'kind': 'validation',
        }), 405
