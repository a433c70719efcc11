import logging
import re

from ..errors import ScrapeError
from ..markdown import PopoverLinks, html_to_markdown
from ..parsing import (
    attr_of, compact, has_class, match_id, parse_html, parse_int, resolve_url,
    text_of,
)
from .common import parse_team_members


logger = logging.getLogger(__name__)


PROPERTY_ROWS = '.table.table-bordered.widetable.hidden.group-2 tr'
INTRO_SELECTOR = '.item-content.common-text.font14'
MOD_LINK = '.common-nav .item[href*="/class/"]'
ITEM_ID = r'/item/(\d+)\.html'

# (field, label in the info list, pattern)
COUNT_STATS = (
    ('viewCount', '浏览量', re.compile(r'浏览量[：:]\s*(\d+)')),
    ('editCount', '编辑次数', re.compile(r'编辑次数[：:]\s*(\d+)')),
)
TIME_STATS = (
    ('createTime', '创建'),
    ('lastUpdate', '最后编辑'),
)

RECIPE_TYPE = 'p[style="color:#888"]'
AMOUNT = re.compile(r'(.*)\s*\*\s*(\d+)')


def _property_row(soup, label):
    for tr in soup.select(PROPERTY_ROWS):
        if label in tr.get_text():
            return tr
    return None


def parse_properties(soup):
    properties = []
    for tr in soup.select(PROPERTY_ROWS):
        cells = tr.find_all('td')
        if not cells:
            continue
        name = cells[0].get_text().replace('：', '').strip()
        value = cells[-1].get_text().strip()
        if name and value:
            properties.append({'name': name, 'value': value})
    return properties


def _amount(el):
    match = AMOUNT.search(el.get_text().strip())
    if not match:
        return None
    return match.group(1).strip(), int(match.group(2))


def parse_recipes(soup):
    recipes = []
    for block in soup.select('.item-table-block-out'):
        type_el = block.select_one(f'.item-table-count {RECIPE_TYPE}')
        recipe_type = re.sub(r'[\[\]]', '', type_el.get_text()).strip() if type_el else ''

        materials = []
        for p in block.select(f'.item-table-count p:not({RECIPE_TYPE})'):
            # everything after the arrow is the product
            if '↓' in p.get_text():
                break
            amount = _amount(p)
            if amount is None:
                continue
            name, count = amount
            materials.append(compact({
                'name': name,
                'count': count,
                'itemId': match_id(ITEM_ID, attr_of(p, 'a', 'href')),
            }, keep=('name', 'count')))

        result_el = block.select_one('.item-table-count p:-soup-contains("↓") + p')
        result = {'name': '', 'count': 1}
        if result_el is not None:
            amount = _amount(result_el)
            if amount is not None:
                result['name'], result['count'] = amount
            result['itemId'] = match_id(ITEM_ID, attr_of(result_el, 'a', 'href'))

        recipes.append(compact({
            'type': recipe_type,
            'materials': materials,
            'result': compact(result, keep=('name', 'count')),
            'notes': text_of(block, '.item-table-remarks .remark'),
            'version': text_of(block, '.alert-table-endver, .alert-table-startver'),
        }, keep=('type', 'materials', 'result')))
    return recipes


def parse_related_items(soup, base_url):
    items = []
    for li in soup.select('.common-imglist-block:-soup-contains("相关物品") .common-imglist li'):
        link = li.select_one('.text a')
        if link is None:
            continue
        name = link.get_text().strip()
        if not name:
            continue
        href = link.get('href', '')
        items.append(compact({
            'id': match_id(ITEM_ID, href),
            'name': name,
            'icon': resolve_url(attr_of(li, '.img img', 'src'), base_url),
            'url': resolve_url(href, base_url),
            'isHighlight': has_class(link, 'common-text-red'),
        }, keep=('id', 'name', 'isHighlight')))
    return items


def parse_statistics(soup):
    rows = soup.select('.common-rowlist-2 li')
    statistics = {}
    for field, label, pattern in COUNT_STATS:
        text = ''.join(li.get_text() for li in rows if label in li.get_text())
        match = pattern.search(text)
        statistics[field] = int(match.group(1)) if match else 0
    for field, label in TIME_STATS:
        for li in rows:
            if li.has_attr('data-original-title') and label in li.get_text():
                statistics[field] = li['data-original-title'].strip()
                break
    return statistics


def parse_item(item_id, fetcher, others=False):
    logger.debug(f'Parsing item {item_id}')
    base_url = fetcher.base_url
    try:
        html = fetcher.get(f'/item/{item_id}.html')
        soup = parse_html(html)
        if soup.select_one('.itemname') is None:
            raise ScrapeError(f'未找到ID为{item_id}的物品')

        name = text_of(soup, '.itemname .name h5')
        english_name = match_id(r'\((.*?)\)', name).strip()
        if not english_name:
            row = _property_row(soup, '次要名称')
            cells = row.find_all('td') if row is not None else []
            english_name = cells[-1].get_text().strip() if cells else ''

        intro = soup.select_one(INTRO_SELECTOR)
        popovers = PopoverLinks.from_html(html)
        item = {
            'id': item_id,
            'name': name,
            'englishName': english_name,
            'icon': resolve_url(attr_of(soup, '.righttable img[width="128"]', 'src'), base_url),
            'intro': html_to_markdown(
                intro.decode_contents(), popovers.resolve, base_url) if intro else '',
        }

        mod_link = attr_of(soup, MOD_LINK, 'href')
        mod_id = match_id(r'/class/(\d+)\.html', mod_link)
        if mod_id:
            item['modId'] = mod_id
            item['modName'] = text_of(soup, MOD_LINK)
            item['modUrl'] = resolve_url(mod_link, base_url)

        category_row = _property_row(soup, '资料分类')
        if category_row is not None:
            cells = category_row.find_all('td')
            category = cells[-1].find('a') if cells else None
            if category is not None:
                item['category'] = category.get_text().strip()
                item['categoryUrl'] = resolve_url(category.get('href', ''), base_url)

        item['properties'] = parse_properties(soup)
        item['recipes'] = parse_recipes(soup)

        if others:
            item['metrics'] = {'statistics': compact(parse_statistics(soup))}
            item['teams'] = compact({
                'recentEditors': parse_team_members(soup, '最近参与编辑', base_url),
                'recentVisitors': parse_team_members(soup, '最近浏览', base_url),
                'relatedItems': parse_related_items(soup, base_url),
            })

        logger.debug(f'Parsed item {item_id}: {name}')
        return compact(item, keep=('id', 'name', 'intro'))
    except Exception as e:
        logger.debug(f'Could not parse item {item_id}: {e}')
        raise ScrapeError(f'解析物品详情失败: {e}') from e
