from pathlib import Path
from typing import Optional

# Import configuration management
import sys
sys.path.append(str(Path(__file__).parent.parent))
from config_manager import ConfigManager

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from app.collector.factory import create_collector_module


def create_app(data_dir: Optional[Path] = None) -> Flask:
    """Create the collection server.

    Args:
        data_dir: Directory for collected sessions; defaults to the
            configured path relative to the project root

    Returns:
        Configured Flask application
    """
    flask_app = Flask(__name__)
    flask_app.wsgi_app = ProxyFix(
            flask_app.wsgi_app,
            x_proto = 1,     # trust 1 hop for X-Forwarded-Proto
            x_host  = 1,     # trust 1 hop for X-Forwarded-Host
            x_prefix= 1)     # <-- pay attention to X-Forwarded-Prefix

    if data_dir is None:
        paths_config = ConfigManager().get_paths_config()
        data_dir = Path(__file__).parent.parent / paths_config.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)

    collector_module = create_collector_module(data_dir=data_dir)
    flask_app.register_blueprint(collector_module["blueprint"])
    flask_app.extensions["collector_service"] = collector_module["service"]

    @flask_app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    return flask_app


# -----------------------------------------------------------------------------
# Application
# -----------------------------------------------------------------------------

app = create_app()
