"""Tests for the HTTP surface in app.py."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from mcmodapi import create_app


class TestEntityRoutes:
    def test_mod(self, client):
        resp = client.get('/api/class?id=1')
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['basicInfo']['name'] == '工业时代2'
        assert 'metrics' not in data
        assert resp.headers['Cache-Control'] == 'public, max-age=3600'

    def test_flags_parsed(self, client):
        data = client.get('/api/class?id=1&others=true&community=true&relations=1').get_json()
        assert 'metrics' in data
        assert 'community' in data
        assert 'relations' not in data

    def test_non_ascii_body(self, client):
        resp = client.get('/api/class?id=1')
        assert '工业时代2'.encode('utf-8') in resp.data

    def test_invalid_id(self, client, fetcher):
        resp = client.get('/api/class?id=abc')
        assert resp.status_code == 400
        assert resp.get_json() == {'error': '无效参数', 'message': 'ID必须是数字'}
        assert fetcher.requested == []

    def test_missing_id(self, client, fetcher):
        resp = client.get('/api/item')
        assert resp.status_code == 400
        assert resp.get_json() == {'error': '参数缺失', 'message': '缺少ID参数'}
        assert fetcher.requested == []

    def test_not_found(self, client):
        resp = client.get('/api/class?id=404')
        assert resp.status_code == 404
        assert resp.get_json() == {
            'error': '获取模组失败',
            'message': '解析模组详情失败: 未找到ID为404的模组',
        }

    @pytest.mark.parametrize('path, title', [
        ('/api/item?id=2', '获取物品失败'),
        ('/api/modpack?id=6', '获取整合包失败'),
        ('/api/post?id=9', '获取教程失败'),
        ('/api/server?id=99', '获取服务器失败'),
    ])
    def test_error_titles(self, client, path, title):
        resp = client.get(path)
        assert resp.status_code == 404
        assert resp.get_json()['error'] == title

    @pytest.mark.parametrize('path, key', [
        ('/api/item?id=1', 'name'),
        ('/api/modpack?id=5', 'basicInfo'),
        ('/api/post?id=7', 'content'),
        ('/api/server?id=8', 'status'),
    ])
    def test_other_entities(self, client, path, key):
        resp = client.get(path)
        assert resp.status_code == 200
        assert key in resp.get_json()


class TestSearchRoute:
    def test_search(self, client, fetcher):
        resp = client.get('/api/search?q=ic2')
        assert resp.status_code == 200
        data = resp.get_json()
        assert fetcher.requested == ['/s?key=ic2&page=1']
        assert data['page'] == 1
        assert data['total'] == 4
        assert data['totalResults'] == 95
        assert len(data['results']) == 3

    @pytest.mark.parametrize('query', ['', 'q=', 'q=%20%20'])
    def test_missing_query(self, client, fetcher, query):
        resp = client.get(f'/api/search?{query}')
        assert resp.status_code == 400
        assert resp.get_json() == {
            'error': '缺少参数',
            'message': '请提供搜索关键词，例如: /api/search?q=minecraft',
        }
        assert fetcher.requested == []

    def test_offset_wins_over_page(self, client, fetcher):
        resp = client.get('/api/search?q=ic2&offset=45&page=5')
        assert resp.status_code == 200
        assert fetcher.requested == ['/s?key=ic2&page=2']
        assert resp.get_json()['page'] == 2

    def test_page(self, client, fetcher):
        client.get('/api/search?q=ic2&page=2')
        assert fetcher.requested == ['/s?key=ic2&page=2']

    def test_mold_and_filter(self, client, fetcher):
        fetcher.pages['/s?key=ic2&page=1&mold=1&filter=3'] = fetcher.pages['/s?key=ic2&page=1']
        resp = client.get('/api/search?q=ic2&mold=1&filter=3')
        assert resp.status_code == 200
        assert fetcher.requested == ['/s?key=ic2&page=1&mold=1&filter=3']

    def test_upstream_failure(self, client):
        resp = client.get('/api/search?q=nothing')
        assert resp.status_code == 500
        assert resp.get_json()['error'] == '搜索失败'


class TestListRoute:
    def test_list(self, client, fetcher):
        resp = client.get('/api/list?category=tech&page=2')
        assert resp.status_code == 200
        assert fetcher.requested == ['/class-tech-2.html']
        data = resp.get_json()
        assert data['totalPages'] == 12
        assert data['currentPage'] == 2
        assert data['results'][0]['id'] == '2'

    def test_defaults(self, client, fetcher):
        assert client.get('/api/list').status_code == 200
        assert fetcher.requested == ['/class-1.html']

    def test_failure(self, client):
        resp = client.get('/api/list?page=40')
        assert resp.status_code == 500
        assert resp.get_json()['error'] == '获取列表失败'


class TestHttpSurface:
    def test_cors_on_success(self, client):
        resp = client.get('/api/class?id=1')
        assert resp.headers['Access-Control-Allow-Origin'] == '*'
        assert resp.headers['Access-Control-Allow-Methods'] == 'GET, OPTIONS'
        assert resp.headers['Access-Control-Allow-Headers'] == '*'

    def test_cors_on_error(self, client):
        resp = client.get('/api/class?id=abc')
        assert resp.headers['Access-Control-Allow-Origin'] == '*'

    def test_preflight(self, client, fetcher):
        resp = client.options('/api/class')
        assert resp.status_code == 200
        assert resp.headers['Access-Control-Allow-Origin'] == '*'
        assert fetcher.requested == []

    def test_unknown_path(self, client):
        resp = client.get('/api/nope')
        assert resp.status_code == 404
        assert resp.get_json() == {'error': '路径不存在', 'message': '请使用有效的 API 端点'}
        assert resp.headers['Access-Control-Allow-Origin'] == '*'

    def test_doc_page(self, client):
        resp = client.get('/')
        assert resp.status_code == 200
        assert resp.mimetype == 'text/html'
        page = resp.get_data(as_text=True)
        assert 'MCmod API 文档' in page
        for path in ('/api/search', '/api/class', '/api/item', '/api/modpack',
                     '/api/post', '/api/server', '/api/list'):
            assert f'<code>{path}</code>' in page

    def test_rate_limit(self, fetcher):
        app = create_app({'TESTING': True, 'RATE_LIMIT': '2 per minute'}, fetcher=fetcher)
        client = app.test_client()
        assert client.get('/').status_code == 200
        assert client.get('/').status_code == 200
        resp = client.get('/')
        assert resp.status_code == 429
        assert 'error' in resp.get_json()


class TestAccessLog:
    def test_requests_logged(self, fetcher, tmp_path):
        access_logger = logging.getLogger('mcmodapi.access')
        app = create_app({'RATELIMIT_ENABLED': False, 'LOG_DIR': str(tmp_path)}, fetcher=fetcher)
        try:
            app.test_client().get('/api/class?id=abc')
            for handler in access_logger.handlers:
                handler.flush()
            log = (tmp_path / 'access.log').read_text(encoding='utf-8')
            assert 'GET /api/class?id=abc - 400' in log
        finally:
            for handler in list(access_logger.handlers):
                if isinstance(handler, RotatingFileHandler):
                    access_logger.removeHandler(handler)
                    handler.close()

    def test_each_log_dir_gets_its_own_file(self, fetcher, tmp_path):
        access_logger = logging.getLogger('mcmodapi.access')
        first, second = tmp_path / 'first', tmp_path / 'second'
        try:
            create_app({'RATELIMIT_ENABLED': False, 'LOG_DIR': str(first)}, fetcher=fetcher)
            app = create_app({'RATELIMIT_ENABLED': False, 'LOG_DIR': str(second)}, fetcher=fetcher)
            create_app({'RATELIMIT_ENABLED': False, 'LOG_DIR': str(second)}, fetcher=fetcher)
            app.test_client().get('/api/class?id=abc')
            for handler in access_logger.handlers:
                handler.flush()
            assert 'GET /api/class?id=abc - 400' in (second / 'access.log').read_text(encoding='utf-8')
            files = [h.baseFilename for h in access_logger.handlers if isinstance(h, RotatingFileHandler)]
            assert sorted(files) == sorted([str(first / 'access.log'), str(second / 'access.log')])
        finally:
            for handler in list(access_logger.handlers):
                if isinstance(handler, RotatingFileHandler):
                    access_logger.removeHandler(handler)
                    handler.close()
