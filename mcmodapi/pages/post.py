import logging

from ..errors import ScrapeError
from ..markdown import PopoverLinks, html_to_markdown
from ..parsing import compact, match_id, parse_html, text_of


logger = logging.getLogger(__name__)


def parse_post(post_id, fetcher):
    logger.debug(f'Parsing post {post_id}')
    try:
        html = fetcher.get(f'/post/{post_id}.html')
        soup = parse_html(html)
        if soup.select_one('.post-title') is None:
            raise ScrapeError(f'未找到ID为{post_id}的教程')

        content = soup.select_one('.post-content')
        popovers = PopoverLinks.from_html(html)
        post = {
            'id': post_id,
            'title': text_of(soup, '.post-title'),
            'content': html_to_markdown(
                content.decode_contents(), popovers.resolve, fetcher.base_url) if content else '',
            'author': text_of(soup, '.post-author a'),
            'date': text_of(soup, '.post-date'),
        }

        views = match_id(r'(\d+)', text_of(soup, '.post-view'))
        if views:
            post['views'] = int(views)

        logger.debug(f'Parsed post {post_id}: {post["title"]}')
        return compact(post, keep=('id', 'title', 'content'))
    except Exception as e:
        logger.debug(f'Could not parse post {post_id}: {e}')
        raise ScrapeError(f'解析教程详情失败: {e}') from e
