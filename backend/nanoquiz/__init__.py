import json

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def get_registry(app):
    return app.extensions['nanoquiz']['registry']


def get_rate_limiter(app):
    return app.extensions['nanoquiz']['rate_limiter']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Session registry and rate limiter live for the life of this app
    from nanoquiz.services.quiz import SessionRegistry, SlidingWindowRateLimiter
    from nanoquiz.services.quiz.broadcast import SocketIOBroadcaster
    from nanoquiz.services.quiz.scheduler import RoundScheduler

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    registry = SessionRegistry.from_config(
        flask_app.config,
        SocketIOBroadcaster(socketio, namespace=namespace),
        RoundScheduler.for_app(flask_app, socketio),
        logger=flask_app.logger,
    )
    rate_limiter = SlidingWindowRateLimiter(
        window_sec=flask_app.config.get('RATE_LIMIT_WINDOW_SEC', 10),
        max_events=flask_app.config.get('RATE_LIMIT_MAX', 30),
    )
    flask_app.extensions['nanoquiz'] = {'registry': registry, 'rate_limiter': rate_limiter}

    from nanoquiz.routes import main
    flask_app.register_blueprint(main)

    from nanoquiz.api.quizzes import quizzes
    flask_app.register_blueprint(quizzes, url_prefix='/api/quizzes')

    from nanoquiz.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('validate-quiz')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def validate_quiz_command(path):
        """Checks a quiz JSON file the same way host:createGame does."""
        from nanoquiz.services.quiz import parse_quiz
        with open(path, encoding='utf-8') as fh:
            try:
                payload = json.load(fh)
            except json.JSONDecodeError as exc:
                raise click.ClickException(f'Not valid JSON: {exc}')
        result = parse_quiz(payload)
        if not result.ok:
            raise click.ClickException(result.error)
        click.echo(f'OK: "{result.quiz.title}" with {len(result.quiz.questions)} questions')

    flask_app.cli.add_command(validate_quiz_command)

    return flask_app
