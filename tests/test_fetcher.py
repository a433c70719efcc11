"""Tests for fetcher.py and config.py."""

import pytest
import requests

from mcmodapi import fetcher as fetcher_module
from mcmodapi.config import DEFAULTS, ENV_KEYS, load_config
from mcmodapi.errors import FetchError
from mcmodapi.fetcher import Fetcher, fetch_html


class FakeResponse:
    def __init__(self, text='', status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} Error', response=self)


@pytest.fixture
def calls(monkeypatch):
    """Route requests.get through a queue of canned outcomes."""
    recorded = []
    outcomes = []

    def fake_get(url, **kwargs):
        recorded.append((url, kwargs))
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(fetcher_module.requests, 'get', fake_get)
    return recorded, outcomes


class TestFetchHtml:
    def test_returns_body(self, calls):
        recorded, outcomes = calls
        outcomes.append(FakeResponse('<html>ok</html>'))
        assert fetch_html('https://www.mcmod.cn/class/1.html', timeout=5, user_agent='UA') == '<html>ok</html>'
        url, kwargs = recorded[0]
        assert url == 'https://www.mcmod.cn/class/1.html'
        assert kwargs['headers'] == {'User-Agent': 'UA'}
        assert kwargs['timeout'] == 5

    def test_timeout(self, calls):
        _, outcomes = calls
        outcomes.append(requests.Timeout('slow'))
        with pytest.raises(FetchError, match='请求超时'):
            fetch_html('https://www.mcmod.cn/')

    def test_http_status(self, calls):
        _, outcomes = calls
        outcomes.append(FakeResponse('oops', status_code=500))
        with pytest.raises(FetchError) as exc:
            fetch_html('https://www.mcmod.cn/')
        assert str(exc.value) == 'HTTP 500'

    def test_connection_failure(self, calls):
        _, outcomes = calls
        outcomes.append(requests.ConnectionError('refused'))
        with pytest.raises(FetchError) as exc:
            fetch_html('https://www.mcmod.cn/')
        assert str(exc.value).startswith('请求失败')

    def test_no_retry(self, calls):
        recorded, outcomes = calls
        outcomes.append(FakeResponse('', status_code=503))
        with pytest.raises(FetchError):
            fetch_html('https://www.mcmod.cn/')
        assert len(recorded) == 1


class TestFetcher:
    def test_url_joins_base(self):
        fetcher = Fetcher('https://www.mcmod.cn/')
        assert fetcher.url('/item/1.html') == 'https://www.mcmod.cn/item/1.html'

    def test_get_uses_settings(self, calls):
        recorded, outcomes = calls
        outcomes.append(FakeResponse('body'))
        fetcher = Fetcher('https://mirror.test', timeout=3, user_agent='Bot')
        assert fetcher.get('/post/2.html') == 'body'
        url, kwargs = recorded[0]
        assert url == 'https://mirror.test/post/2.html'
        assert kwargs['timeout'] == 3
        assert kwargs['headers']['User-Agent'] == 'Bot'


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_KEYS.values():
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfig:
    def test_defaults(self, clean_env):
        config = load_config()
        for key, value in DEFAULTS.items():
            assert config[key] == value

    def test_environment(self, clean_env):
        clean_env.setenv('MCMOD_BASE_URL', 'https://mirror.test/')
        clean_env.setenv('MCMOD_FETCH_TIMEOUT', '5')
        clean_env.setenv('DEBUG', 'True')
        clean_env.setenv('MCMOD_RATELIMIT_ENABLED', 'false')
        config = load_config()
        assert config['BASE_URL'] == 'https://mirror.test'
        assert config['FETCH_TIMEOUT'] == 5
        assert config['DEBUG'] is True
        assert config['RATELIMIT_ENABLED'] is False

    def test_bad_number_falls_back(self, clean_env):
        clean_env.setenv('MCMOD_CACHE_MAX_AGE', 'soon')
        assert load_config()['CACHE_MAX_AGE'] == DEFAULTS['CACHE_MAX_AGE']

    def test_overrides_win(self, clean_env):
        clean_env.setenv('MCMOD_FETCH_TIMEOUT', '5')
        config = load_config({'FETCH_TIMEOUT': 9, 'TESTING': True})
        assert config['FETCH_TIMEOUT'] == 9
        assert config['TESTING'] is True
