"""Keyword search over the site's ``/s`` results page."""
import logging
import re
from urllib.parse import quote

from .errors import ScrapeError
from .parsing import attr_of, match_id, parse_html, text_of


logger = logging.getLogger(__name__)


PAGE_SIZE = 30
MAX_FILTER = 7

# ordered; the first pattern matching a result URL decides its type
TYPE_PATTERNS = (
    ('class', re.compile(r'/class/(\d+)\.html')),
    ('modpack', re.compile(r'/modpack/(\d+)\.html')),
    ('post', re.compile(r'/post/(\d+)\.html')),
    ('item', re.compile(r'/item/(\d+)\.html')),
    ('author', re.compile(r'/author/(\d+)\.html')),
    ('user', re.compile(r'/center\.mcmod\.cn/(\d+)')),
    ('community', re.compile(r'/bbs\.mcmod\.cn/thread-(\d+)-\d+-\d+\.html')),
    ('server', re.compile(r'/sv/(\d+)\.html')),
)

# (field, pattern) applied to the summary sentence above the results
META_PATTERNS = (
    ('totalResults', re.compile(r'找到约\s*(\d+)\s*条结果')),
    ('totalPages', re.compile(r'共约\s*(\d+)\s*页')),
)


def offset_to_page(offset, page_size=PAGE_SIZE):
    return max(0, offset) // page_size + 1


def build_search_path(query, page, mold=False, filter_type=0):
    path = f'/s?key={quote(query, safe="")}&page={page}'
    if mold:
        path += '&mold=1'
    if 0 < filter_type <= MAX_FILTER:
        path += f'&filter={filter_type}'
    return path


def classify(url):
    """Return ``(type, id)`` for a result URL, or ``(None, '')``."""
    for kind, pattern in TYPE_PATTERNS:
        match = pattern.search(url)
        if match:
            return kind, match.group(1)
    return None, ''


def parse_meta(soup):
    info = text_of(soup, '.search-result p.info')
    meta = {}
    for field, pattern in META_PATTERNS:
        match = pattern.search(info)
        meta[field] = int(match.group(1)) if match else 0
    return meta


def _category(item):
    link = item.select_one('.head .class-category ul li a')
    if link is None:
        return ''
    return match_id(r'c_(\d+)', ' '.join(link.get('class') or []))


def parse_results(soup, limit=PAGE_SIZE):
    results = []
    for item in soup.select('.search-result-list .result-item'):
        if len(results) >= limit:
            break
        url = attr_of(item, '.foot .info:first-child .value a', 'href')
        if not url:
            continue
        kind, result_id = classify(url)
        if kind is None:
            continue

        result = {
            'id': result_id,
            'name': text_of(item, '.head > a') or '未知名称',
            'description': text_of(item, '.body') or '暂无描述',
            'type': kind,
            'url': url,
        }
        if kind == 'class':
            category = _category(item)
            if category:
                result['category'] = category
        results.append(result)
    return results


def search(query, fetcher, offset=0, mold=False, filter_type=0):
    page = offset_to_page(offset)
    logger.debug(f'Searching "{query}" page={page} offset={offset} mold={mold} filter={filter_type}')
    if not query.strip():
        raise ScrapeError('搜索内容失败: 搜索关键词不能为空')
    try:
        soup = parse_html(fetcher.get(build_search_path(query, page, mold, filter_type)))
        meta = parse_meta(soup)
        results = parse_results(soup)
    except Exception as e:
        logger.debug(f'Search for "{query}" failed: {e}')
        raise ScrapeError(f'搜索内容失败: {e}') from e

    logger.debug(f'Search for "{query}" found {len(results)} results, {meta["totalPages"]} pages')
    return {
        'results': results,
        'page': page,
        'total': meta['totalPages'],
        'totalResults': meta['totalResults'],
    }
