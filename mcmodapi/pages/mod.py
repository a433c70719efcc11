import logging
import re

from ..errors import ScrapeError
from ..markdown import PopoverLinks, html_to_markdown
from ..parsing import (
    attr_of, compact, has_class, li_containing, match_id, parse_html,
    parse_int, resolve_url, text_of, texts_of,
)
from .common import (
    INTRO_SELECTOR, parse_authors, parse_links, parse_team_members,
    parse_time_stats, parse_tutorials, parse_update_logs, parse_votes,
)


logger = logging.getLogger(__name__)


STATUS_LABELS = {
    '停更': 'inactive',
    '半弃坑': 'semi-abandoned',
}

LOADER_LABELS = (
    ('行为包', 'behaviorPack'),
    ('Forge', 'forge'),
    ('Fabric', 'fabric'),
)

# (field, pattern) applied to every info line; first group is the value
STAT_PATTERNS = (
    ('editCount', re.compile(r'编辑次数[:：]\s*(\d+)\s*次')),
    ('modpackCount', re.compile(r'有\s*(\d+)\s*个已收录的整合包')),
    ('serverCount', re.compile(r'有\s*(\d+)\s*台已收录的服务器')),
    ('serverInstallRate', re.compile(r'安装率为\s*([0-9.]+)%')),
)

# (field, index into '.block-right .text', label prefix)
INDEX_STATS = (
    ('yesterdayIndex', 0, '昨日指数:'),
    ('yesterdayAvgIndex', 1, '昨日平均指数:'),
)

TEAM_BLOCKS = (
    ('managementTeam', '管理组'),
    ('editingTeam', '编辑组'),
    ('developmentTeam', '开发组'),
    ('recentEditors', '最近参与编辑'),
    ('recentVisitors', '最近浏览'),
)

RATING_CATEGORIES = {
    '趣味': ('好玩', '一般', '没意思'),
    '难度': ('有挑战', '一般', '太简单'),
    '稳定': ('很稳定', '一般', '不稳定'),
    '实用': ('很实用', '一般', '没啥用'),
    '美观': ('很漂亮', '一般', '太丑了'),
    '平衡': ('合理', '一般', '变态'),
    '兼容': ('兼容好', '一般', '兼容差'),
    '持久': ('很耐玩', '一般', '容易腻'),
}


def _status(soup):
    label = text_of(soup, '.class-status')
    return {
        'status': STATUS_LABELS.get(label, 'active'),
        'isOpenSource': text_of(soup, '.class-source') != '闭源',
    }


def parse_categories(soup):
    categories = []
    for a in soup.select('.common-class-category .main a'):
        category_id = match_id(r'category=(\d+)', a.get('href', ''))
        use = a.select_one('svg use')
        icon_ref = (use.get('xlink:href') or use.get('href') or '') if use else ''
        category_id = match_id(r'#common-icon-category-(\d+)', icon_ref) or category_id
        if category_id and category_id not in categories:
            categories.append(category_id)

    for a in soup.select('.common-class-category .normal'):
        category_id = match_id(r'category=(\d+)', a.get('href', ''))
        if category_id and category_id not in categories:
            categories.append(category_id)
    return categories


def _info_links(soup, label):
    texts = []
    for li in li_containing(soup, '.class-info-left li', label):
        texts.extend(texts_of(li, 'a'))
    return texts


def parse_compatibility(soup):
    environment = ''.join(
        li.get_text() for li in li_containing(soup, '.class-info-left li', '运行环境')
    )
    compatibility = {
        'platforms': _info_links(soup, '支持平台'),
        'apis': _info_links(soup, '运作方式'),
        'environment': re.sub(r'运行环境[:：]', '', environment).strip(),
    }

    mc_versions = {}
    for ul in soup.select('.mcver ul'):
        first = ul.find('li')
        loader = first.get_text().strip() if first else ''
        versions = texts_of(ul, 'a')
        for label, field in LOADER_LABELS:
            if label in loader:
                mc_versions[field] = versions
                break
    if mc_versions:
        compatibility['mcVersions'] = mc_versions
    return compatibility


def parse_statistics(soup):
    infos = soup.select('.infos .span')
    download_title = attr_of(soup, '.download-btn', 'title')
    statistics = {
        'viewCount': text_of(infos[0], '.n') if infos else '',
        'fillRate': text_of(infos[-1], '.n') if infos else '',
        'popularity': text_of(soup, '.block-left .up'),
        'downloadCount': download_title.replace('共', '').replace('次下载', '').strip(),
    }

    index_texts = soup.select('.block-right .text')
    for field, index, prefix in INDEX_STATS:
        if index < len(index_texts):
            statistics[field] = index_texts[index].get_text().replace(prefix, '').strip()

    for el in soup.select('.class-info-left li, .infolist'):
        text = el.get_text()
        for field, pattern in STAT_PATTERNS:
            match = pattern.search(text)
            if match:
                statistics[field] = match.group(1)

    statistics.update(parse_time_stats(soup))
    return compact(statistics)


def parse_detailed_ratings(soup):
    ratings = {}
    for block in soup.select('.progress-list'):
        tooltip = block.select_one('div[data-original-title]')
        if tooltip is None:
            continue
        title = tooltip.get('data-original-title', '')
        match = re.search(r'\[([\u4e00-\u9fa5]+)\]', title)
        if not match or match.group(1) not in RATING_CATEGORIES:
            continue
        category = match.group(1)
        positive, neutral, negative = RATING_CATEGORIES[category]
        ratings[category] = {
            'positive': match_id(rf'{positive}:(\d+)', title) or '0',
            'neutral': match_id(rf'{neutral}:(\d+)', title) or '0',
            'negative': match_id(rf'{negative}:(\d+)', title) or '0',
        }
    return ratings


def parse_teams(soup, base_url):
    teams = {}
    for field, label in TEAM_BLOCKS:
        members = parse_team_members(soup, label, base_url)
        if members:
            teams[field] = members
    return teams


def parse_resources(soup):
    resources = []
    for mold in soup.select('.class-item-type .mold'):
        if has_class(mold, 'mold-0'):
            continue
        link = mold.find('a')
        if link is None:
            continue
        resources.append({
            'typeId': match_id(r'/\d+-(\d+)\.html$', link.get('href', '')),
            'count': parse_int(match_id(r'\((\d+)条\)', text_of(link, '.count'))),
        })
    return resources


def parse_discussions(soup):
    discussions = []
    for a in soup.select('.class-thread-list li a'):
        thread_id = match_id(r'thread-(\d+)-', a.get('href', ''))
        if thread_id:
            discussions.append({'id': thread_id, 'title': a.get_text().strip()})
    return discussions


def parse_relations(soup):
    relations = []
    for fieldset in soup.select('.class-relation-list fieldset'):
        relation = {'version': text_of(fieldset, 'legend')}
        for rel in fieldset.select('li.relation'):
            field = 'dependencyMods' if '依赖' in text_of(rel, 'span') else 'relationMods'
            mods = [
                compact({
                    'id': match_id(r'/class/(\d+)\.html$', a.get('href', '')),
                    'name': a.get_text().strip(),
                }, keep=('name',))
                for a in rel.select('ul a')
            ]
            if mods:
                relation.setdefault(field, []).extend(mods)
        relations.append(relation)
    return relations


def parse_mod(mod_id, fetcher, others=False, community=False, relations=False):
    """Scrape ``/class/{id}.html`` into a mod record."""
    logger.debug(f'Parsing mod {mod_id}')
    base_url = fetcher.base_url
    try:
        html = fetcher.get(f'/class/{mod_id}.html')
        soup = parse_html(html)
        if soup.select_one('.class-title') is None:
            raise ScrapeError(f'未找到ID为{mod_id}的模组')

        basic_info = compact({
            'id': mod_id,
            'name': text_of(soup, '.class-title h3'),
            'englishName': text_of(soup, '.class-title h4'),
            'shortName': text_of(soup, '.class-title .short-name'),
            'img': resolve_url(attr_of(soup, '.class-cover-image img', 'src'), base_url),
            'status': _status(soup),
            'categories': parse_categories(soup),
            'tags': texts_of(soup, '.class-info-left .tag a'),
        }, keep=('id', 'name'))

        mod = {
            'basicInfo': basic_info,
            'compatibility': compact(parse_compatibility(soup)),
            'authors': parse_authors(soup, base_url),
            'links': parse_links(soup, base_url),
        }

        if others:
            mod['metrics'] = compact({
                'statistics': parse_statistics(soup),
                'ratings': compact({
                    **parse_votes(soup),
                    'detailedRatings': parse_detailed_ratings(soup),
                }),
                'updateLogs': parse_update_logs(soup),
            })
            teams = parse_teams(soup, base_url)
            if teams:
                mod['teams'] = teams

        mod['resources'] = parse_resources(soup)

        if community:
            mod['community'] = compact({
                'tutorials': parse_tutorials(soup),
                'discussions': parse_discussions(soup),
            })

        if relations:
            mod['relations'] = parse_relations(soup)

        intro = soup.select_one(INTRO_SELECTOR)
        if intro is not None:
            popovers = PopoverLinks.from_html(html)
            mod['introduction'] = html_to_markdown(
                intro.decode_contents(), popovers.resolve, base_url)

        logger.debug(f'Parsed mod {mod_id}: {basic_info["name"]}')
        return compact(mod, keep=('basicInfo', 'compatibility', 'resources'))
    except Exception as e:
        logger.debug(f'Could not parse mod {mod_id}: {e}')
        raise ScrapeError(f'解析模组详情失败: {e}') from e
