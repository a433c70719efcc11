import base64
import binascii
import logging
import re

from bs4 import BeautifulSoup


logger = logging.getLogger(__name__)


_SITE_DOUBLE_SLASH = re.compile(r'https?://www\.mcmod\.cn//')
_THUMB_SUFFIX = re.compile(r'@\d+x\d+\.jpg$')
_EXTERNAL_TARGET = re.compile(r'link\.mcmod\.cn/target/([A-Za-z0-9+/=_-]+)')
_USER_ID = re.compile(r'/(\d+)/?$')
_LEADING_INT = re.compile(r'^\s*([-+]?\d+)')


def parse_html(html):
    return BeautifulSoup(html, 'lxml')


def text_of(node, selector):
    """Concatenated text of every element matching ``selector``, stripped."""
    return ''.join(el.get_text() for el in node.select(selector)).strip()


def texts_of(node, selector):
    texts = []
    for el in node.select(selector):
        text = el.get_text().strip()
        if text:
            texts.append(text)
    return texts


def attr_of(node, selector, name):
    el = node.select_one(selector)
    if el is None:
        return ''
    value = el.get(name, '')
    if isinstance(value, list):
        value = ' '.join(value)
    return value.strip()


def li_containing(node, selector, label):
    return [el for el in node.select(selector) if label in el.get_text()]


def has_class(el, name):
    return name in (el.get('class') or [])


def clean_image_url(url):
    if not url:
        return ''
    if url.startswith('//'):
        url = 'https:' + url
    url = _SITE_DOUBLE_SLASH.sub('//', url)
    return _THUMB_SUFFIX.sub('', url)


def decode_external_link(url):
    if not url:
        return url
    match = _EXTERNAL_TARGET.search(url)
    if not match:
        return url

    encoded = match.group(1).replace('-', '+').replace('_', '/')
    encoded += '=' * (-len(encoded) % 4)
    try:
        return base64.b64decode(encoded).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as e:
        logger.debug(f'Could not decode external link {url}: {e}')
        return url


def resolve_url(path, base):
    if not path:
        return ''
    path = clean_image_url(path)
    if 'link.mcmod.cn/target/' in path:
        return decode_external_link(path)
    if path.startswith('//'):
        return 'https:' + path
    if path.startswith('/'):
        return base + path
    return path


def extract_user_id(url):
    match = _USER_ID.search(url or '')
    return match.group(1) if match else ''


def match_id(pattern, url):
    match = re.search(pattern, url or '')
    return match.group(1) if match else ''


def parse_int(value, default=0):
    """Leading integer of ``value``, or ``default`` when there is none."""
    if value is None:
        return default
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else default


def compact(mapping, keep=()):
    return {
        key: value for key, value in mapping.items()
        if key in keep or value not in (None, '', [], {})
    }
