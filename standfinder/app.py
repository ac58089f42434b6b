"""
StandFinder Flask Application.

Main entry point for the web application. Wires together:
- Database schema
- Two-tier stand cache
- Data source adapters
- Stand resolution engine
- API routes

Usage:
    python -m standfinder.app

Or with gunicorn:
    gunicorn 'standfinder.app:create_app()'
"""

import logging
import os
import time
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, current_app, jsonify
from flask_cors import CORS
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from standfinder.api import airports_bp, crowdsource_bp, stands_bp
from standfinder.cache import StandCache
from standfinder.config import AppConfig, config
from standfinder.models import init_db, make_engine, make_session_factory
from standfinder.repository import StandRepository
from standfinder.services import StandResolutionEngine
from standfinder.sources import DataSourceManager

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else getattr(logging, config.log_level.upper(), logging.INFO),
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    app_config: Optional[AppConfig] = None,
    engine: Optional[Engine] = None,
    session_factory: Optional[sessionmaker] = None,
    sources: Optional[DataSourceManager] = None,
    cache: Optional[StandCache] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        app_config: Configuration; defaults to the environment-derived config.
        engine: Database engine. Built from app_config when omitted.
        session_factory: Session factory; defaults to one bound to engine.
        sources: Data source adapters. Built from app_config when omitted.
        cache: Stand cache. Built from app_config when omitted.
                Tests pass in-memory versions of all of these.

    Returns:
        Configured Flask application instance.
    """
    app_config = app_config or config

    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = app_config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': app_config.cors_origin}})

    # Initialize database
    if engine is None:
        if session_factory is not None:
            engine = session_factory.kw['bind']
        else:
            engine = make_engine(app_config.database.url, echo=app_config.debug)
    session_factory = session_factory or make_session_factory(engine)

    logger.info('Initializing database...')
    init_db(engine)

    repository = StandRepository(session_factory)
    sources = sources if sources is not None else DataSourceManager.from_config(app_config)
    cache = cache if cache is not None else StandCache.from_config(app_config.cache, app_config.redis)

    app.config['STAND_REPOSITORY'] = repository
    app.config['STAND_CACHE'] = cache
    app.config['STAND_ENGINE'] = StandResolutionEngine(
        repository=repository,
        sources=sources,
        cache=cache,
        flight_cache_ttl_seconds=app_config.cache.flight_ttl_seconds,
    )
    app.config['STARTED_AT'] = time.time()

    # Register API blueprints
    app.register_blueprint(stands_bp)
    app.register_blueprint(airports_bp)
    app.register_blueprint(crowdsource_bp)

    logger.info(f'StandFinder ready with {len(sources)} data source(s)')

    @app.route('/api/health')
    def health():
        """Health check with cache statistics."""
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'uptime_seconds': round(time.time() - current_app.config['STARTED_AT'], 1),
            'cache': current_app.config['STAND_CACHE'].stats,
        })

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    # Get port from environment or default
    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting StandFinder on http://localhost:{port}')
    logger.info(f'Stand lookup: http://localhost:{port}/api/stand?flight=BA1489&airport=EGLL')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
    )


if __name__ == '__main__':
    run_development_server()
