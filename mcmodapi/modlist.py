import logging
from urllib.parse import quote

from .errors import ScrapeError
from .parsing import attr_of, match_id, parse_html, parse_int, resolve_url, text_of


logger = logging.getLogger(__name__)


LAST_PAGE_PATTERNS = (
    r'class-(?:.+?)-(\d+)\.html',
    r'class-(\d+)\.html',
)


def build_list_path(category, page):
    if category:
        return f'/class-{quote(category, safe="")}-{page}.html'
    return f'/class-{page}.html'


def parse_total_pages(soup):
    last = soup.select_one('.paging-item-max')
    if last is None:
        return 1
    href = last.get('href', '')
    if href:
        for pattern in LAST_PAGE_PATTERNS:
            total = match_id(pattern, href)
            if total:
                return int(total)
        return 1
    return parse_int(last.get_text().strip(), 1) or 1


def list_mods(fetcher, category='', page=1):
    page = max(1, page)
    base_url = fetcher.base_url
    logger.debug(f'Listing mods category="{category}" page={page}')
    try:
        soup = parse_html(fetcher.get(build_list_path(category, page)))
        if soup.select_one('.item-list') is None:
            raise ScrapeError('无法获取模组列表，可能页面结构已更改或参数无效')

        mods = []
        for item in soup.select('.item-third'):
            link = attr_of(item, 'a', 'href')
            mod_id = match_id(r'/class/(\d+)\.html', link)
            if not mod_id:
                continue
            mods.append({
                'id': mod_id,
                'name': text_of(item, '.item-title a') or '未知名称',
                'description': text_of(item, '.item-desc') or '暂无描述',
                'imageUrl': resolve_url(attr_of(item, 'img', 'src'), base_url),
                'type': 'mod',
                'url': resolve_url(link, base_url),
            })
        total = parse_total_pages(soup)
    except Exception as e:
        logger.debug(f'Could not list mods: {e}')
        raise ScrapeError(f'获取模组列表失败: {e}') from e

    logger.debug(f'Listed {len(mods)} mods, {total} pages')
    return {'results': mods, 'totalPages': total, 'currentPage': page}
