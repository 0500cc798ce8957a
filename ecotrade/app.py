# app.py
import logging
import os

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ecotrade.config import Config
from ecotrade.errors import EcoTradeError
from ecotrade.models import db
from ecotrade.routes import api
from ecotrade.seed import seed_data


def register_error_handlers(app):

    @app.errorhandler(EcoTradeError)
    def handle_domain_error(error):
        db.session.rollback()
        app.logger.warning('%s: %s', type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        app.logger.exception('Unhandled error')
        return jsonify({'success': False, 'error': 'Internal server error'}), 500


def register_commands(app):

    @app.cli.command('init-db')
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo('Tables created')

    @app.cli.command('seed')
    def seed():
        """Load demo users, products, plants and submissions."""
        db.create_all()
        if seed_data():
            click.echo('Demo data created')
        else:
            click.echo('Database already has data, nothing to do')


def create_app(config=Config):
    app = Flask(__name__)
    app.config.from_object(config)
    app.json.sort_keys = False
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(),
                                logging.INFO))

    db.init_app(app)
    app.register_blueprint(api)
    register_error_handlers(app)
    register_commands(app)

    # create tables that do not exist yet
    with app.app_context():
        db.create_all()

    return app


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    create_app().run(host='0.0.0.0', port=port)
