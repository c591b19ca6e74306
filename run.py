# run.py
# This script launches the Flask application. Host, port, debug mode and log
# level come from COLORSAME_HOST, COLORSAME_PORT, COLORSAME_DEBUG and
# COLORSAME_LOG_LEVEL.

import logging
import os

from colorsame.app import app

if __name__ == '__main__':
    logging.basicConfig(
        level=os.environ.get('COLORSAME_LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app.run(
        host=os.environ.get('COLORSAME_HOST', '0.0.0.0'),
        port=int(os.environ.get('COLORSAME_PORT', 5001)),
        debug=os.environ.get('COLORSAME_DEBUG', '1').lower() in ('1', 'true', 'yes'),
    )
