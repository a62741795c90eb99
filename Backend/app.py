"""Local development server exposing the serverless functions through Flask"""
import os

from flask import Flask, Response, jsonify, request

from api.check_live import get_live_statuses, live_cache
from api.health import health_status
from api.shared import cors_headers, get_settings, resolve_origin
from api.update_banner import update_banner

app = Flask(__name__)


def _respond(status, body, methods):
    headers = cors_headers(resolve_origin(request.headers.get("Origin"), get_settings()), methods)
    if status == 204:
        return Response(status=204, headers=headers)
    if isinstance(body, (dict, list)):
        response = jsonify(body)
        response.status_code = status
    else:
        response = Response(body, status=status, mimetype="text/plain")
    response.headers.update(headers)
    return response


@app.route('/api/update_banner', methods=['OPTIONS', 'POST', 'GET', 'PUT', 'PATCH', 'DELETE'])
def update_banner_route():
    if request.method == 'OPTIONS':
        return _respond(204, None, 'POST')
    if request.method != 'POST':
        return _respond(405, "Method Not Allowed", 'POST')

    status, body = update_banner(
        request.get_data(),
        request.headers.get('Authorization'),
        get_settings(),
    )
    return _respond(status, body, 'POST')


@app.route('/api/check_live', methods=['OPTIONS', 'GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
def check_live_route():
    if request.method == 'OPTIONS':
        return _respond(204, None, 'GET')
    if request.method != 'GET':
        return _respond(405, "Method Not Allowed", 'GET')

    status, body = get_live_statuses(get_settings(), live_cache)
    return _respond(status, body, 'GET')


@app.route('/api/health')
def health():
    return _respond(200, health_status(get_settings(), live_cache), 'GET')


if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
