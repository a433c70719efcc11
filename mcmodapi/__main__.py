import logging
import os

from .app import create_app


if __name__ == '__main__':
    app = create_app()
    logging.basicConfig(
        level=logging.DEBUG if app.config['DEBUG'] else logging.INFO,
        format='%(asctime)s [%(name)s] %(message)s',
    )
    app.run(
        host=os.environ.get('HOST', '0.0.0.0'),
        port=int(os.environ.get('PORT', '8787')),
        debug=app.config['DEBUG'],
    )
