from http.server import BaseHTTPRequestHandler
import json
from urllib.parse import urlparse

from api._config import missing_credentials
from api._spotify import now_playing_response


class handler(BaseHTTPRequestHandler):
    def do_GET(self):
        # Parse the URL path
        path = urlparse(self.path).path.rstrip('/')

        # Route to appropriate function based on path
        if path in ('/api/now-playing', '/api/now_playing'):
            self.handle_now_playing()
        elif path == '/api/health':
            self.handle_health()
        else:
            self.send_error(404, 'Not Found')

    def handle_now_playing(self):
        print("--- [LOG] API call received ---")
        payload, status_code, headers = now_playing_response()
        self.send_json_response(payload, status_code, headers)

    def handle_health(self):
        missing = missing_credentials()
        self.send_json_response({'status': 'ok', 'configured': not missing, 'missing': missing}, 200)

    def send_json_response(self, data, status_code, headers=None):
        self.send_response(status_code)
        for name, value in (headers or {'Content-Type': 'application/json'}).items():
            self.send_header(name, value)
        self.send_cors_headers()
        self.end_headers()
        self.wfile.write(json.dumps(data).encode('utf-8'))

    def send_cors_headers(self):
        self.send_header('Access-Control-Allow-Origin', '*')
        self.send_header('Access-Control-Allow-Methods', 'GET, OPTIONS')
        self.send_header('Access-Control-Allow-Headers', 'Content-Type')

    def do_OPTIONS(self):
        self.send_response(200)
        self.send_cors_headers()
        self.end_headers()
