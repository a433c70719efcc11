import logging

import requests

from .errors import FetchError


logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = 30
DEFAULT_USER_AGENT = 'Mozilla/5.0'


def fetch_html(url, timeout=DEFAULT_TIMEOUT, user_agent=DEFAULT_USER_AGENT):
    logger.debug(f'Fetching {url}')
    try:
        resp = requests.get(url, headers={'User-Agent': user_agent}, timeout=timeout)
        resp.raise_for_status()
    except requests.Timeout as e:
        logger.debug(f'Timed out after {timeout}s: {url}')
        raise FetchError('请求超时') from e
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else 'error'
        logger.debug(f'Upstream returned {status}: {url}')
        raise FetchError(f'HTTP {status}') from e
    except requests.RequestException as e:
        logger.debug(f'Could not fetch {url}: {e}')
        raise FetchError(f'请求失败: {e}') from e

    html = resp.text
    logger.debug(f'Fetched {url} ({len(html)} bytes)')
    return html


class Fetcher:
    """Fetches pages from one upstream site."""

    def __init__(self, base_url, timeout=DEFAULT_TIMEOUT, user_agent=DEFAULT_USER_AGENT):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.user_agent = user_agent

    def url(self, path):
        return f'{self.base_url}{path}'

    def get(self, path):
        return fetch_html(self.url(path), timeout=self.timeout, user_agent=self.user_agent)
