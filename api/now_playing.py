from flask import Flask, jsonify
from flask_cors import CORS

from api._config import missing_credentials
from api._spotify import now_playing_response

app = Flask(__name__)
CORS(app)


@app.route("/api/now-playing", methods=["GET"])
@app.route("/api/now_playing", methods=["GET"])
def now_playing():
    print("--- [LOG] API call received ---")
    payload, status_code, headers = now_playing_response()
    return jsonify(payload), status_code, headers


@app.route("/api/health", methods=["GET"])
def health():
    missing = missing_credentials()
    return jsonify({
        "status": "ok",
        "configured": not missing,
        "missing": missing,
    })


if __name__ == "__main__":
    app.run(port=5000, debug=True)
