"""Launch the curve editor: ``python main.py [text with numbers]``."""

import logging

from curve_editor.main import main

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    main()
