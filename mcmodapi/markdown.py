"""Rich-text HTML to Markdown conversion.

Conversion is done by a markdownify converter tuned for the site's markup:
images prefer their lazy-load source, ``javascript:`` anchors are resolved
through the page's popover scripts, and the site's styled title spans become
headings. The result is tidied by ``clean_markdown``. Text that is already
Markdown (no HTML tags outside code) is only tidied, so converting an output
again returns it unchanged.
"""
import re

from bs4 import NavigableString
from markdownify import ATX, MarkdownConverter, chomp

from .parsing import has_class, parse_html, resolve_url


DEFAULT_BASE_URL = 'https://www.mcmod.cn'

POPOVER_PATTERN = re.compile(
    r'\$\("#(link_[a-zA-Z0-9_]+)"\)\.webuiPopover\(\{[^}]*content:"[^"]*<strong>([^<]+)</strong>'
)

MARKDOWN_LINK = re.compile(r'\[.*?\]\(.*?\)')
PROTOCOL_RELATIVE_TARGET = re.compile(r'\]\(//')

# a "<" that an HTML parser would read as the start of a tag
TAG_OPEN = re.compile(r'<(?=[A-Za-z/!?])')
UNESCAPED_TAG_OPEN = re.compile(r'(?<!\\)<[A-Za-z/!?]')
CODE_SPANS = re.compile(r'```.*?```|`[^`\n]*`', re.DOTALL)
FENCED_BLOCK = re.compile(r'^```[^\n]*\n.*?^```[ \t]*$', re.DOTALL | re.MULTILINE)
STASHED_BLOCK = re.compile(r'\x00(\d+)\x00')

# class of the site's styled titles -> heading level
TITLE_LEVELS = (
    ('common-text-title-1', 2),
    ('common-text-title-2', 3),
)
DEFAULT_TITLE_LEVEL = 4
DEFAULT_ALT = '图片'


class PopoverLinks:
    """Real targets of ``javascript:`` anchors that open a webui popover.

    The site renders some external links as ``<a id="link_X"
    href="javascript:void(0);">`` and emits the destination inside an inline
    script, bolded in the popover content.
    """

    def __init__(self, urls=None):
        self.urls = dict(urls or {})

    @classmethod
    def from_html(cls, html):
        return cls({m.group(1): m.group(2) for m in POPOVER_PATTERN.finditer(html or '')})

    def resolve(self, link_id):
        return self.urls.get(link_id)

    def __len__(self):
        return len(self.urls)


def _collapse(text):
    return re.sub(r'\s+', ' ', text).strip()


def _only_image(anchor):
    children = [
        child for child in anchor.contents
        if not (isinstance(child, NavigableString) and not child.strip())
    ]
    if len(children) == 1 and getattr(children[0], 'name', None) == 'img':
        return children[0]
    return None


def _title_level(el):
    if not has_class(el, 'common-text-title'):
        return None
    for cls, level in TITLE_LEVELS:
        if has_class(el, cls):
            return level
    return DEFAULT_TITLE_LEVEL


class SiteMarkdownConverter(MarkdownConverter):
    """markdownify converter for the site's rich-text fields.

    ``resolve_link`` maps an anchor ``id`` to its deferred destination, or
    returns None when the anchor is an ordinary link.
    """

    class Options(MarkdownConverter.DefaultOptions):
        heading_style = ATX
        bullets = '-'
        escape_asterisks = False
        escape_underscores = False
        table_infer_header = True

    def __init__(self, resolve_link=None, base_url=DEFAULT_BASE_URL, **options):
        super().__init__(**options)
        self.resolve_link = resolve_link
        self.base_url = base_url

    def escape(self, text, parent_tags):
        text = super().escape(text, parent_tags)
        return TAG_OPEN.sub(r'\\<', text)

    def link_target(self, anchor):
        href = (anchor.get('href') or '').strip()
        link_id = anchor.get('id') or ''
        if link_id and self.resolve_link is not None:
            href = self.resolve_link(link_id) or href
        if href.startswith('javascript:'):
            return ''
        return resolve_url(href, self.base_url) if href else ''

    def convert_a(self, el, text, parent_tags):
        if '_noformat' in parent_tags:
            return text
        href = self.link_target(el)

        if _only_image(el) is not None:
            image = text.strip()
            return f'[{image}]({href})' if href else image

        prefix, suffix, text = chomp(text)
        text = _collapse(text)
        if not text:
            return ''
        if not href or MARKDOWN_LINK.search(text):
            return f'{prefix}{text}{suffix}'
        return f'{prefix}[{text}]({href}){suffix}'

    def convert_img(self, el, text, parent_tags):
        src = el.get('data-src') or el.get('src') or ''
        alt = _collapse(el.get('alt') or '') or DEFAULT_ALT
        alt = TAG_OPEN.sub(r'\\<', alt)
        return f'![{alt}]({resolve_url(src, self.base_url)})'

    def convert_hN(self, n, el, text, parent_tags):
        if not text.strip():
            return ''
        return super().convert_hN(n, el, text, parent_tags)

    def convert_span(self, el, text, parent_tags):
        level = _title_level(el)
        if level is None or '_inline' in parent_tags:
            return text
        return self.convert_hN(level, el, text, parent_tags)

    def convert_div(self, el, text, parent_tags):
        level = _title_level(el)
        if level is not None and '_inline' not in parent_tags:
            return self.convert_hN(level, el, text, parent_tags)
        return super().convert_div(el, text, parent_tags)

    def convert_td(self, el, text, parent_tags):
        return super().convert_td(el, text.replace('|', '\\|'), parent_tags)

    def convert_th(self, el, text, parent_tags):
        return super().convert_th(el, text.replace('|', '\\|'), parent_tags)


def _has_markup(text):
    return UNESCAPED_TAG_OPEN.search(CODE_SPANS.sub('', text)) is not None


def html_to_markdown(html, resolve_link=None, base_url=DEFAULT_BASE_URL):
    """Convert a rich-text HTML fragment to Markdown."""
    if not html or not html.strip():
        return ''
    if not _has_markup(html):
        return clean_markdown(html)

    converter = SiteMarkdownConverter(resolve_link=resolve_link, base_url=base_url)
    return clean_markdown(converter.convert_soup(parse_html(html)))


def clean_markdown(text):
    # fenced code keeps its own spacing
    blocks = []

    def stash(match):
        blocks.append(match.group(0))
        return f'\x00{len(blocks) - 1}\x00'

    text = FENCED_BLOCK.sub(stash, text.replace('\xa0', ' '))
    text = re.sub(r' {3,}', ' ', text)
    text = re.sub(r'[ \t]+\n', '\n', text)
    text = re.sub(r'\n{3,}', '\n\n', text)

    paragraphs = [p.strip() for p in re.split(r'\n{2,}', text)]
    text = '\n\n'.join(p for p in paragraphs if p)

    text = PROTOCOL_RELATIVE_TARGET.sub('](https://', text)
    text = STASHED_BLOCK.sub(lambda m: blocks[int(m.group(1))], text)
    return text.strip()
