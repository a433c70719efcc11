import re

from flask import jsonify

from .errors import ApiError
from .parsing import parse_int


CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, OPTIONS',
    'Access-Control-Allow-Headers': '*',
}

_NUMERIC_ID = re.compile(r'[0-9]+')


def add_cors_headers(response):
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    response.headers['X-Content-Type-Options'] = 'nosniff'
    return response


def success_response(data, max_age=0):
    response = jsonify(data)
    if max_age:
        response.headers['Cache-Control'] = f'public, max-age={max_age}'
    return response


def error_response(error):
    if isinstance(error, ApiError):
        err = error
    elif isinstance(error, str):
        err = ApiError('错误', error, 500)
    else:
        err = ApiError('错误', str(error) or error.__class__.__name__, 500)
    response = jsonify(err.to_dict())
    response.status_code = err.status or 500
    return response


def validate_id(value):
    if not value:
        raise ApiError('参数缺失', '缺少ID参数', 400)
    if not _NUMERIC_ID.fullmatch(value):
        raise ApiError('无效参数', 'ID必须是数字', 400)
    return value


def validate_page(value):
    return max(1, parse_int(value, 1))


def flag(args, name):
    return args.get(name) == 'true'
