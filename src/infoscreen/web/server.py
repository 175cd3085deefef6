#!/usr/bin/env python3
"""
Web server for one infoscreen front-end.

Serves the browser application, the content lists of the screen's feeds, the
screen configuration and repository files (optionally resized).
"""

import threading
from pathlib import Path

from flask import Flask, Response, abort, jsonify, request, send_from_directory
from werkzeug.serving import make_server

from ..context import AppContext, Screen
from ..utils.log_utils import get_logger
from ..utils.utils import is_image_file

logger = get_logger(__name__)


def create_app(context: AppContext, screen: Screen) -> Flask:
    """Build the Flask app serving `screen`."""
    app = Flask(__name__, static_folder=None)
    app_root = Path(context.config.app_root).resolve()
    repo_root = context.repository.root.resolve()

    @app.after_request
    def allow_any_origin(response: Response) -> Response:
        if request.path.startswith("/api/"):
            response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    @app.route('/api/content')
    def get_content():
        """Entries of all feeds of this screen plus the summed serial."""
        snapshot = context.registry.snapshot(screen.feeds)
        data = {
            feed: [entry.to_dict() for entry in entries]
            for feed, entries in snapshot.feeds.items()
            if feed != "ticker_default"
        }
        default = snapshot.feeds.get("ticker_default", ())
        data["ticker_default"] = default[0].text if default else ""
        data["serial"] = snapshot.serial
        return jsonify(data)

    @app.route('/api/config')
    def get_config():
        """Display settings for the front-end."""
        cfg = screen.config
        return jsonify({
            "screen_config": cfg.screen_config,
            "content_image_display_duration": cfg.content_image_display_duration,
            "ticker_display_duration": cfg.ticker_display_duration,
            "mixin_image_display_duration": cfg.mixin_image_display_duration,
            "mixin_image_rate": cfg.mixin_image_rate,
            "open_weather_map_url": cfg.open_weather_map_url,
            "open_weather_map_api_key": cfg.open_weather_map_api_key,
            "open_weather_map_city_id": cfg.open_weather_map_city_id,
        })

    @app.route('/api/rep/<path:name>')
    def get_repo_file(name):
        """Serve a repository file, resized to fit w x h when both are given."""
        width = request.args.get("w", default=0, type=int)
        height = request.args.get("h", default=0, type=int)
        logger.debug("Repo request: %s w=%d h=%d", name, width, height)

        if is_image_file(name) and width > 0 and height > 0:
            if "/" in name or "\\" in name or name.startswith("."):
                abort(404)
            data = context.images.try_get_image(name, width, height)
            if data is None:
                abort(404)
            return Response(data, mimetype="image/png")

        return send_from_directory(repo_root, name)

    @app.route('/')
    @app.route('/<path:path>')
    def get_app_file(path="index.html"):
        """Serve the browser application."""
        logger.info("Request: %s", request.path)
        return send_from_directory(app_root, path)

    return app


class ScreenServer(threading.Thread):
    """Runs the werkzeug server of one screen in a background thread."""

    def __init__(self, context: AppContext, screen: Screen):
        super().__init__(name=f"http-{screen.config.bind_port}", daemon=True)
        self.screen = screen
        self.app = create_app(context, screen)
        self._server = make_server(
            screen.config.bind_adr,
            screen.config.bind_port,
            self.app,
            threaded=True,
        )

    def run(self) -> None:
        logger.info("Serving %s", self.screen.config.url)
        self._server.serve_forever()
        logger.info("HTTP server for %s exited", self.screen.config.url)

    def shutdown(self) -> None:
        self._server.shutdown()
