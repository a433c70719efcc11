from .item import parse_item
from .mod import parse_mod
from .modpack import parse_modpack
from .post import parse_post
from .server import parse_server


__all__ = ['parse_item', 'parse_mod', 'parse_modpack', 'parse_post', 'parse_server']
