import logging
import re

from ..errors import ScrapeError
from ..markdown import PopoverLinks, html_to_markdown
from ..parsing import (
    attr_of, compact, li_containing, match_id, parse_html, resolve_url,
    text_of, texts_of,
)
from .common import (
    INTRO_SELECTOR, parse_authors, parse_links, parse_team_members,
    parse_time_stats, parse_tutorials, parse_update_logs, parse_votes,
)


logger = logging.getLogger(__name__)


# tag links carry an icon glyph rendered as a stray "i"
_TAG_TRIM = re.compile(r'^[\s\ufeff\xa0i]+|[\s\ufeff\xa0i]+$')


def parse_categories(soup):
    categories = []
    for a in soup.select('.class-category a'):
        category_id = match_id(r'/category/(\d+)-', a.get('href', ''))
        if category_id and category_id not in categories:
            categories.append(category_id)
    return categories


def parse_compatibility(soup):
    def links(label):
        texts = []
        for li in li_containing(soup, '.class-info-left li', label):
            texts.extend(texts_of(li, 'a'))
        return texts

    pack_types = links('整合包类型')
    compatibility = {
        'packType': ''.join(pack_types),
        'apiType': links('运作方式'),
        'packMethod': links('打包方式'),
    }

    mc_versions = []
    for version in texts_of(soup, '.mcver ul a'):
        if version not in mc_versions:
            mc_versions.append(version)
    compatibility['mcVersions'] = mc_versions
    return compact(compatibility)


def parse_statistics(soup):
    infos = soup.select('.infos .span')
    index_texts = soup.select('.block-right .text')
    edit_text = ''.join(
        li.get_text() for li in li_containing(soup, '.class-info-left li', '编辑次数')
    )
    statistics = {
        'viewCount': text_of(infos[0], '.n') if infos else '',
        'popularity': text_of(soup, '.block-left .up'),
        'yesterdayIndex': index_texts[0].get_text().replace('昨日指数:', '').strip() if index_texts else '',
        'yesterdayAvgIndex': index_texts[1].get_text().replace('昨日平均指数:', '').strip() if len(index_texts) > 1 else '',
        'editCount': re.sub(r'编辑次数[:：]|次', '', edit_text).strip(),
    }
    statistics.update(parse_time_stats(soup))
    return compact(statistics)


def parse_included_mods(soup):
    mods = []
    for li in soup.select('.class-relation-list .relation.modlist ul li'):
        paragraphs = li.find_all('p')
        link = li.select_one('p a')
        if link is None:
            continue
        mod_id = match_id(r'/class/(\d+)\.html', link.get('href', ''))
        if not mod_id:
            continue
        mods.append(compact({
            'id': mod_id,
            'name': link.get_text().strip(),
            'version': paragraphs[-1].get_text().strip() if paragraphs else '',
        }, keep=('id', 'name')))
    return mods


def parse_modpack(pack_id, fetcher, others=False, community=False, relations=False):
    logger.debug(f'Parsing modpack {pack_id}')
    base_url = fetcher.base_url
    try:
        html = fetcher.get(f'/modpack/{pack_id}.html')
        soup = parse_html(html)
        if soup.select_one('.class-title') is None:
            raise ScrapeError(f'未找到ID为{pack_id}的整合包')

        tags = [_TAG_TRIM.sub('', a.get_text()) for a in soup.select('.tag a')]
        basic_info = compact({
            'id': pack_id,
            'name': text_of(soup, '.class-title h3'),
            'englishName': text_of(soup, '.class-title h4'),
            'shortName': text_of(soup, '.class-title .short-name'),
            'img': resolve_url(attr_of(soup, '.class-cover-image img', 'src'), base_url),
            'categories': parse_categories(soup),
            'tags': [tag for tag in tags if tag],
        }, keep=('id', 'name'))

        modpack = {
            'basicInfo': basic_info,
            'compatibility': parse_compatibility(soup),
            'authors': parse_authors(soup, base_url),
            'links': parse_links(soup, base_url),
        }

        if others:
            modpack['metrics'] = compact({
                'statistics': parse_statistics(soup),
                'ratings': parse_votes(soup),
                'updateLogs': parse_update_logs(soup),
            })
            modpack['teams'] = compact({
                'recentEditors': parse_team_members(soup, '最近参与编辑', base_url),
                'recentVisitors': parse_team_members(soup, '最近浏览', base_url),
            })

        pack_relations = {}
        if relations:
            pack_relations['mods'] = parse_included_mods(soup)
        if community:
            pack_relations['tutorials'] = parse_tutorials(soup)
        modpack['relations'] = compact(pack_relations)

        intro = soup.select_one(INTRO_SELECTOR)
        if intro is not None:
            popovers = PopoverLinks.from_html(html)
            modpack['introduction'] = html_to_markdown(
                intro.decode_contents(), popovers.resolve, base_url)

        logger.debug(f'Parsed modpack {pack_id}: {basic_info["name"]}')
        return compact(modpack, keep=('basicInfo', 'compatibility'))
    except Exception as e:
        logger.debug(f'Could not parse modpack {pack_id}: {e}')
        raise ScrapeError(f'解析整合包详情失败: {e}') from e
