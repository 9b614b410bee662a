import os
import sys

# Ensure project root is in path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from loguru import logger

from urbact.gradio_app import app

if __name__ == "__main__":
    logger.info("Starting Urban Activities dashboard (usually http://127.0.0.1:7860)")
    app.launch(inbrowser=True, show_error=True)
