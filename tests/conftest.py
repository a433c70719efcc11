"""Test fixtures for mcmodapi."""

from pathlib import Path

import pytest

from mcmodapi import create_app
from mcmodapi.errors import FetchError


FIXTURES = Path(__file__).parent / 'fixtures'

# upstream path -> fixture file
SITE_PAGES = {
    '/class/1.html': 'class.html',
    '/class/404.html': 'not_found.html',
    '/item/1.html': 'item.html',
    '/item/2.html': 'not_found.html',
    '/modpack/5.html': 'modpack.html',
    '/modpack/6.html': 'not_found.html',
    '/post/7.html': 'post.html',
    '/post/9.html': 'not_found.html',
    '/sv/8.html': 'server.html',
    '/s?key=ic2&page=1': 'search.html',
    '/s?key=ic2&page=2': 'search.html',
    '/class-1.html': 'list.html',
    '/class-tech-2.html': 'list.html',
}


def load_fixture(name):
    return (FIXTURES / name).read_text(encoding='utf-8')


class FakeFetcher:
    """Serves canned HTML by path and records every request."""

    base_url = 'https://www.mcmod.cn'

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.requested = []

    def url(self, path):
        return f'{self.base_url}{path}'

    def get(self, path):
        self.requested.append(path)
        if path not in self.pages:
            raise FetchError('HTTP 404')
        return self.pages[path]


@pytest.fixture
def fetcher():
    return FakeFetcher({path: load_fixture(name) for path, name in SITE_PAGES.items()})


@pytest.fixture
def app(fetcher):
    return create_app({'RATELIMIT_ENABLED': False, 'TESTING': True}, fetcher=fetcher)


@pytest.fixture
def client(app):
    return app.test_client()
