import logging
import re

from ..errors import ScrapeError
from ..parsing import attr_of, compact, has_class, parse_html, resolve_url, text_of


logger = logging.getLogger(__name__)


DEFAULT_PORT = '25565'
ADDRESS = re.compile(r'(.+?)(?::(\d+))?$')
PLAYERS = re.compile(r'(\d+)\s*/\s*(\d+)')


def parse_server(server_id, fetcher):
    logger.debug(f'Parsing server {server_id}')
    base_url = fetcher.base_url
    try:
        soup = parse_html(fetcher.get(f'/sv/{server_id}.html'))
        if soup.select_one('.server-name') is None:
            raise ScrapeError(f'未找到ID为{server_id}的服务器')

        server = {
            'id': server_id,
            'name': text_of(soup, '.server-name'),
            'description': text_of(soup, '.server-desc') or '暂无描述',
            'imageUrl': resolve_url(attr_of(soup, '.server-logo img', 'src'), base_url),
            'version': text_of(soup, '.server-version'),
        }

        address = ADDRESS.match(text_of(soup, '.server-ip'))
        if address:
            server['ip'] = address.group(1)
            server['port'] = address.group(2) or DEFAULT_PORT

        status = soup.select_one('.server-status')
        server['status'] = 'online' if status is not None and has_class(status, 'online') else 'offline'

        if server['status'] == 'online':
            players = PLAYERS.search(text_of(soup, '.server-players'))
            if players:
                server['online'] = int(players.group(1))
                server['players'] = int(players.group(2))

        logger.debug(f'Parsed server {server_id}: {server["name"]}')
        return compact(server, keep=('id', 'name', 'description', 'status'))
    except Exception as e:
        logger.debug(f'Could not parse server {server_id}: {e}')
        raise ScrapeError(f'解析服务器详情失败: {e}') from e
