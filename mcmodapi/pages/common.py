"""Sections shared by the mod, modpack and item pages."""
from ..parsing import (
    attr_of, compact, extract_user_id, li_containing, match_id, resolve_url,
    text_of,
)


INTRO_SELECTOR = '.class-menu-main .text-area.common-text.font14'

TIME_LABELS = (
    ('createTime', '收录时间'),
    ('lastUpdate', '最后编辑'),
    ('lastRecommend', '最后推荐'),
)


def parse_authors(soup, base_url):
    authors = []
    for member in soup.select('.author .member'):
        name = text_of(member, '.name a')
        if not name:
            continue
        avatar = attr_of(member.parent, '.avatar a img', 'src') if member.parent else ''
        authors.append(compact({
            'name': name,
            'position': text_of(member, '.position'),
            'avatar': resolve_url(avatar, base_url),
            'id': match_id(r'/author/(\d+)\.html', attr_of(member, '.name a', 'href')),
        }, keep=('name',)))
    return authors


def parse_links(soup, base_url):
    links = []
    seen = set()
    for li in soup.select('.common-link-icon-frame li'):
        a = li.find('a')
        if a is None:
            continue
        href = a.get('href', '')
        title = a.get('data-original-title', '').strip() or text_of(li, '.name')
        if not href or 'javascript:' in href:
            continue
        url = resolve_url(href, base_url)
        if url and 'javascript:' not in url and url not in seen:
            seen.add(url)
            links.append(compact({'title': title, 'url': url}, keep=('url',)))
    return links


def parse_team_members(soup, label, base_url):
    members = []
    for block in soup.select(f'.common-imglist-block:-soup-contains("{label}") .common-imglist'):
        if block.select_one('.null') is not None:
            continue
        for li in block.find_all('li'):
            name = text_of(li, '.text a')
            if not name:
                continue
            members.append({
                'name': name,
                'avatar': resolve_url(attr_of(li, '.img img', 'src'), base_url),
                'id': extract_user_id(resolve_url(attr_of(li, '.text a', 'href'), base_url)),
            })
    return members


def parse_time_stats(soup):
    stats = {}
    for field, label in TIME_LABELS:
        matches = li_containing(soup, '.class-info-left li', label)
        if matches:
            value = matches[0].get('data-original-title', '').strip()
            if value:
                stats[field] = value
    return stats


def parse_votes(soup):
    spans = soup.select('.class-card .text-block span')
    if not spans:
        return {}
    return compact({
        'redVotes': match_id(r'红票(\d+)', spans[0].get_text()),
        'blackVotes': match_id(r'黑票(\d+)', spans[-1].get_text()),
    })


def parse_update_logs(soup):
    logs = []
    for li in soup.select('.common-rowlist.log li'):
        version = text_of(li, 'a')
        date = text_of(li, '.time')
        if version and date:
            logs.append({'version': version, 'date': date})
    return logs


def parse_tutorials(soup):
    tutorials = []
    seen = set()
    for a in soup.select('.class-post-frame .post-block .title a, .class-post-list li a'):
        post_id = match_id(r'/post/(\d+)\.html', a.get('href', ''))
        if post_id and post_id not in seen:
            seen.add(post_id)
            tutorials.append({'id': post_id, 'title': a.get_text().strip()})
    return tutorials
