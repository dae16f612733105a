#!/usr/bin/env python3
"""
Script to install the spaCy English model used for title term segmentation.
The wheel is cached under the models directory so offline images can be
rebuilt. Title repair falls back to a blank tokenizer when the model is
missing, so this step is optional.
"""

import os
import sys
import argparse
import logging
import subprocess
import urllib.request

from deck_parser.language import get_nlp, is_model_available

logger = logging.getLogger(__name__)

MODELS_DIR = os.environ.get("DECK_MODELS_DIR", "models")

# Model package name -> wheel URL
MODEL_WHEELS = {
    "en_core_web_sm":
        "https://github.com/explosion/spacy-models/releases/download/en_core_web_sm-3.7.1/en_core_web_sm-3.7.1-py3-none-any.whl",
}


def download_file(url, destination):
    """Download a file from URL to destination."""
    logger.info(f"Downloading {url}...")
    try:
        urllib.request.urlretrieve(url, destination)
        logger.info(f"Downloaded {destination}")
        return True
    except Exception as e:
        logger.error(f"Failed to download {url}: {e}")
        return False


def install_wheel(wheel_path):
    logger.info(f"Installing {wheel_path}...")
    subprocess.check_call([sys.executable, "-m", "pip", "install", wheel_path])


def ensure_model(model_name, url, models_dir):
    """Downloads and installs one model unless it is already importable."""
    if is_model_available(model_name):
        logger.info(f"{model_name} already installed, skipping...")
        return True

    wheel_path = os.path.join(models_dir, url.rsplit("/", 1)[-1])
    if not os.path.exists(wheel_path) and not download_file(url, wheel_path):
        return False

    try:
        install_wheel(wheel_path)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.error(f"Failed to install {wheel_path}: {e}")
        return False

    if not is_model_available(model_name):
        logger.error(f"{model_name} is still not importable after install")
        return False

    nlp = get_nlp(model_name)
    logger.info(f"Loaded {model_name} (spaCy {nlp.meta.get('spacy_version', 'unknown')})")
    return True


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="Install the spaCy model used for title segmentation")
    parser.add_argument("--models-dir", default=MODELS_DIR, help="Directory for downloaded wheels")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    os.makedirs(args.models_dir, exist_ok=True)

    installed = [name for name, url in MODEL_WHEELS.items() if ensure_model(name, url, args.models_dir)]
    logger.info(f"Installed {len(installed)}/{len(MODEL_WHEELS)} models")
    if len(installed) != len(MODEL_WHEELS):
        logger.error("Some models could not be installed. Check the URLs and try again.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
