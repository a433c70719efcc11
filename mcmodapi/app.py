import logging
import os
from logging.handlers import RotatingFileHandler

from flask import Blueprint, Flask, Response, current_app, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from .config import load_config
from .doc import render_doc
from .errors import ApiError, ScrapeError
from .fetcher import Fetcher
from .modlist import list_mods
from .pages import parse_item, parse_mod, parse_modpack, parse_post, parse_server
from .parsing import parse_int
from .responses import (
    add_cors_headers, error_response, flag, success_response, validate_id,
    validate_page,
)
from .search import PAGE_SIZE, search


logger = logging.getLogger(__name__)
access_logger = logging.getLogger('mcmodapi.access')


# path, endpoint, extractor, error title, boolean query flags
ENTITY_ROUTES = (
    ('/api/class', 'mod', parse_mod, '获取模组失败', ('others', 'community', 'relations')),
    ('/api/item', 'item', parse_item, '获取物品失败', ('others',)),
    ('/api/modpack', 'modpack', parse_modpack, '获取整合包失败', ('others', 'community', 'relations')),
    ('/api/post', 'post', parse_post, '获取教程失败', ()),
    ('/api/server', 'server', parse_server, '获取服务器失败', ()),
)


api = Blueprint('api', __name__)


def get_fetcher():
    return current_app.extensions['mcmod_fetcher']


def _cache_age():
    return current_app.config['CACHE_MAX_AGE']


def entity_view(extractor, error_title, flags):
    def view():
        entity_id = validate_id(request.args.get('id'))
        options = {name: flag(request.args, name) for name in flags}
        logger.debug(f'{request.path} id={entity_id} {options}')
        try:
            data = extractor(entity_id, get_fetcher(), **options)
        except ScrapeError as e:
            logger.info(f'{request.path} id={entity_id} failed: {e}')
            raise ApiError(error_title, str(e), 404) from e
        return success_response(data, _cache_age())
    return view


for path, endpoint, extractor, error_title, flags in ENTITY_ROUTES:
    api.add_url_rule(path, endpoint, entity_view(extractor, error_title, flags))


@api.route('/api/search')
def search_view():
    query = (request.args.get('q') or '').strip()
    if not query:
        raise ApiError('缺少参数', '请提供搜索关键词，例如: /api/search?q=minecraft', 400)

    # offset wins over page whenever both are given
    offset_param = request.args.get('offset')
    page_param = request.args.get('page')
    if offset_param:
        offset = parse_int(offset_param, 0)
    elif page_param:
        offset = (validate_page(page_param) - 1) * PAGE_SIZE
    else:
        offset = 0

    mold = request.args.get('mold') == '1'
    filter_type = parse_int(request.args.get('filter'), 0)

    try:
        data = search(query, get_fetcher(), offset=offset, mold=mold, filter_type=filter_type)
    except ScrapeError as e:
        logger.info(f'Search for "{query}" failed: {e}')
        raise ApiError('搜索失败', str(e), 500) from e
    return success_response(data, _cache_age())


@api.route('/api/list')
def list_view():
    category = request.args.get('category', '').strip()
    page = validate_page(request.args.get('page'))
    try:
        data = list_mods(get_fetcher(), category=category, page=page)
    except ScrapeError as e:
        logger.info(f'Listing category="{category}" page={page} failed: {e}')
        raise ApiError('获取列表失败', str(e), 500) from e
    return success_response(data, _cache_age())


@api.route('/')
def doc():
    return Response(render_doc(request.host_url.rstrip('/')), mimetype='text/html')


def configure_logging(config):
    level = logging.DEBUG if config['DEBUG'] else logging.INFO
    logging.getLogger('mcmodapi').setLevel(level)

    log_dir = config['LOG_DIR']
    if not log_dir:
        return
    path = os.path.abspath(os.path.join(log_dir, 'access.log'))
    if any(getattr(h, 'baseFilename', None) == path for h in access_logger.handlers):
        return

    os.makedirs(log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        path,
        maxBytes=1024*1024,
        backupCount=5
    )
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
    file_handler.setLevel(logging.INFO)
    access_logger.setLevel(logging.INFO)
    access_logger.addHandler(file_handler)


def create_app(config=None, fetcher=None):
    config = load_config(config)
    configure_logging(config)

    app = Flask(__name__)
    app.config.update(config)
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    app.extensions['mcmod_fetcher'] = fetcher or Fetcher(
        config['BASE_URL'],
        timeout=config['FETCH_TIMEOUT'],
        user_agent=config['USER_AGENT'],
    )

    @app.before_request
    def preflight():
        if request.method == 'OPTIONS':
            return Response(status=200)

    limiter = Limiter(key_func=get_remote_address, default_limits=[config['RATE_LIMIT']])
    limiter.init_app(app)

    app.register_blueprint(api)

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return error_response(e)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        if e.code == 404:
            return error_response(ApiError('路径不存在', '请使用有效的 API 端点', 404))
        return error_response(ApiError(e.name, e.description or e.name, e.code))

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception(f'Unhandled error on {request.path}')
        return error_response(e)

    @app.after_request
    def log_response(response):
        access_logger.info(f'{request.remote_addr} - {request.method} {request.full_path.rstrip("?")} - {response.status_code}')
        return response

    @app.after_request
    def cors(response):
        return add_cors_headers(response)

    return app
