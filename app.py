import logging

import click
from flask import Flask, jsonify

from config import Config
from extensions import cors, compress, limiter
from routes.coach import coach_bp
from services.coach_service import CoachService
from services.gemini_service import GeminiService
from services.scratch_storage import ScratchStorage

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    log_file = app.config.get('LOG_FILE')
    debug_logger = logging.getLogger('debug_logger')
    if log_file and not debug_logger.handlers:
        handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        debug_logger.addHandler(handler)
    debug_logger.setLevel(logging.DEBUG)


def build_coach_service(app, storage):
    """Construct the Gemini-backed service once; None when no API key is configured."""
    api_key = app.config.get('GEMINI_API_KEY')
    if not api_key:
        app.logger.warning('GEMINI_API_KEY is not set; /analyze will fail until it is configured')
        return None
    gemini = GeminiService(
        api_key=api_key,
        model=app.config['GEMINI_MODEL'],
        poll_interval=app.config['POLL_INTERVAL_SECONDS'],
        max_poll_attempts=app.config['POLL_MAX_ATTEMPTS'],
        poll_timeout=app.config['POLL_TIMEOUT_SECONDS'],
    )
    return CoachService(gemini, storage, mime_type=app.config['VIDEO_MIME_TYPE'])


def create_app(config_class=Config, coach_service=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # Initialize Extensions
    cors.init_app(app)
    compress.init_app(app)
    limiter.init_app(app)

    storage = ScratchStorage(app.config['UPLOAD_FOLDER'], app.config['STAGING_FOLDER'])
    if coach_service is None:
        coach_service = build_coach_service(app, storage)
    app.extensions['scratch_storage'] = storage
    app.extensions['coach_service'] = coach_service

    # Register Blueprints
    app.register_blueprint(coach_bp)

    @app.errorhandler(429)
    def ratelimit_handler(e):
        return jsonify(error="ratelimit exceeded", message=str(e.description)), 429

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        return response

    @app.cli.command('purge-scratch')
    @click.option('--max-age-hours', type=float, default=None,
                  help='Remove scratch files older than this (default: SCRATCH_MAX_AGE_HOURS).')
    def purge_scratch(max_age_hours):
        """Delete stale uploads and staged copies."""
        if max_age_hours is None:
            max_age_hours = app.config['SCRATCH_MAX_AGE_HOURS']
        removed = storage.purge_older_than(max_age_hours)
        click.echo(f"Removed {removed} scratch file(s)")

    return app


if __name__ == '__main__':
    app = create_app()
    from waitress import serve
    host, port = app.config['HOST'], app.config['PORT']
    print(f"Starting Waitress server on http://{host}:{port} (Multi-threaded)")
    serve(app, host=host, port=port, threads=app.config['SERVER_THREADS'])
