import logging
import threading
import time
from flask import Flask, jsonify
import requests

from config import KEEP_ALIVE_PORT, SESSION_SECRET

logger = logging.getLogger(__name__)

# How often the bot pings its own health endpoint (in seconds)
PING_INTERVAL = 60 * 60


def create_app(stats_provider=None):
    """
    Create the keep-alive Flask app.

    Args:
        stats_provider: Optional callable returning a dict of bot statistics
    """
    app = Flask(__name__)
    app.secret_key = SESSION_SECRET

    @app.route('/')
    def home():
        """Simple endpoint for uptime monitors to ping."""
        return "Bot is alive!"

    @app.route('/health')
    def health():
        """Health check endpoint for monitoring."""
        return jsonify({
            "status": "healthy",
            "timestamp": time.time()
        })

    @app.route('/status')
    def status():
        """Status endpoint for monitoring services."""
        return jsonify({
            'status': 'online',
            'bot': 'RPG Battle Bot',
            'version': '1.0.0'
        })

    @app.route('/api/stats')
    def stats():
        """API endpoint to get bot statistics."""
        if stats_provider is None:
            return jsonify({'characters': 0, 'skills_learned': 0, 'active_cooldowns': 0})
        try:
            return jsonify(stats_provider())
        except Exception as e:
            logger.error(f"Error loading stats: {e}")
            return jsonify({'error': 'Failed to load stats'}), 500

    return app


def ping_self(port=KEEP_ALIVE_PORT):
    """Ping the application to keep it alive."""
    while True:
        try:
            response = requests.get(f"http://127.0.0.1:{port}/health", timeout=10)
            logger.debug(f"Self-ping returned status code: {response.status_code}")
        except requests.RequestException as e:
            logger.error(f"Error during self-ping: {e}")

        time.sleep(PING_INTERVAL)


def keep_alive(stats_provider=None, port=KEEP_ALIVE_PORT):
    """Start threads to run the Flask app and ping service."""
    app = create_app(stats_provider)

    def run():
        logger.info(f"Keep-alive service started on port {port}")
        app.run(host='0.0.0.0', port=port)

    t = threading.Thread(target=run)
    t.daemon = True
    t.start()

    # Also start a thread to ping ourselves
    ping_thread = threading.Thread(target=ping_self, args=(port,))
    ping_thread.daemon = True
    ping_thread.start()

    return app
