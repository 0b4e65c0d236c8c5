"""
FLASK APP ENTRY POINT - OTP API SERVER

Sets up the Flask app, CORS and the otpkit blueprint.

Settings (environment):
- OTPKIT_CORS_ORIGINS   origins allowed by CORS, comma separated (default "*")
- OTPKIT_VERIFY_WINDOW  default +/- period window for TOTP verification (default 1)
- OTPKIT_MAX_WINDOW     largest "window" a TOTP verify request may ask for (default 10)
- OTPKIT_MAX_LOOK_AHEAD largest "look_ahead" an HOTP verify request may ask for (default 100)

Run:
    flask --app otpkit_api.app run
    python -m otpkit_api.app
"""

import os

from flask import Flask, jsonify
from flask_cors import CORS

from otpkit import __version__

from .routes import otp_bp


def create_app(config=None) -> Flask:
    app = Flask(__name__)
    app.config.update(
        OTPKIT_CORS_ORIGINS=os.environ.get("OTPKIT_CORS_ORIGINS", "*"),
        OTPKIT_VERIFY_WINDOW=int(os.environ.get("OTPKIT_VERIFY_WINDOW", "1")),
        OTPKIT_MAX_WINDOW=int(os.environ.get("OTPKIT_MAX_WINDOW", "10")),
        OTPKIT_MAX_LOOK_AHEAD=int(os.environ.get("OTPKIT_MAX_LOOK_AHEAD", "100")),
    )
    if config:
        app.config.update(config)

    origins = app.config["OTPKIT_CORS_ORIGINS"]
    CORS(app, origins=origins if origins == "*" else [o.strip() for o in origins.split(",")])

    app.register_blueprint(otp_bp)

    @app.route('/', methods=['GET'])
    def index():
        """Service description and endpoint list."""
        return jsonify({
            "service": "otpkit",
            "version": __version__,
            "endpoints": {
                "POST /api/v1/secret": "random Base32 secret",
                "POST /api/v1/hotp": "HOTP code for a counter",
                "POST /api/v1/totp": "TOTP code for now or a timestamp",
                "POST /api/v1/verify/hotp": "verify an HOTP code",
                "POST /api/v1/verify/totp": "verify a TOTP code",
            },
        })

    app.logger.info("otpkit API ready, CORS origins: %s", origins)
    return app


app = create_app()


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
