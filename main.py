#!/usr/bin/env python3
"""
Pitch-deck page segmenter.
Splits every PDF in the input directory into per-page segments with an
inferred slide title and writes one JSON file per deck.
"""
import os
import sys
import json
import argparse
import logging

from tqdm import tqdm

from deck_parser import parse_pdf_file, render_page_to_canvas
from deck_parser.language import segment_into_terms

# Get the directory where the main.py script is located
script_dir = os.path.dirname(os.path.abspath(__file__))

# --- Configuration ---
INPUT_DIR = os.environ.get("DECK_INPUT_DIR", os.path.join(script_dir, "input"))
OUTPUT_DIR = os.environ.get("DECK_OUTPUT_DIR", os.path.join(script_dir, "output"))
PAGES_SUBDIR_SUFFIX = "_pages"

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Pitch-deck page segmenter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --input-dir decks --output-dir out
  python main.py --render --render-scale 1.5
        """
    )
    parser.add_argument("--input-dir", type=str, default=INPUT_DIR,
                        help="Directory containing input PDF files")
    parser.add_argument("--output-dir", type=str, default=OUTPUT_DIR,
                        help="Directory for the JSON output")
    parser.add_argument("--render", action="store_true",
                        help="Also render every segmented page to PNG")
    parser.add_argument("--render-scale", type=float, default=1.0,
                        help="Scale factor for rendered pages")
    parser.add_argument("--no-nlp", action="store_true",
                        help="Skip spaCy term segmentation during title repair")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose logging")

    return parser.parse_args(argv)


def process_pdf(pdf_path: str, output_dir: str, render: bool = False, render_scale: float = 1.0,
                use_nlp: bool = True) -> str:
    """Segments a single PDF and writes <name>.json (and optional page images). Returns the JSON path."""
    base_filename = os.path.basename(pdf_path)
    name_without_ext = os.path.splitext(base_filename)[0]
    final_output_path = os.path.join(output_dir, f"{name_without_ext}.json")

    segmenter = segment_into_terms if use_nlp else None
    segments = parse_pdf_file(pdf_path, segmenter=segmenter)

    with open(final_output_path, 'w', encoding='utf-8') as f:
        json.dump({"file": base_filename, "segments": segments}, f, indent=2, ensure_ascii=False)

    if render:
        pages_dir = os.path.join(output_dir, f"{name_without_ext}{PAGES_SUBDIR_SUFFIX}")
        os.makedirs(pages_dir, exist_ok=True)
        with open(pdf_path, "rb") as f:
            data = f.read()
        for segment in segments:
            if segment.get("page_index") is None:
                continue
            canvas = os.path.join(pages_dir, f"{segment['id']}.png")
            render_page_to_canvas(data, segment["page_index"], canvas, scale=render_scale)

    logger.info(f"Processed {base_filename}: {len(segments)} segment(s) -> {final_output_path}")
    return final_output_path


def main(argv=None) -> int:
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not os.path.exists(args.input_dir):
        logger.warning(f"Input directory '{args.input_dir}' not found. Please create it and place your PDF files inside.")
        return 0

    pdf_files = sorted(f for f in os.listdir(args.input_dir) if f.lower().endswith(".pdf"))
    if not pdf_files:
        logger.warning(f"No PDF files found in '{args.input_dir}'.")
        return 0

    os.makedirs(args.output_dir, exist_ok=True)

    processed = 0
    for filename in tqdm(pdf_files, desc="Segmenting decks"):
        pdf_path = os.path.join(args.input_dir, filename)
        try:
            process_pdf(pdf_path, args.output_dir, render=args.render,
                        render_scale=args.render_scale, use_nlp=not args.no_nlp)
            processed += 1
        except Exception as e:
            logger.error(f"Failed to process {filename}: {e}")

    logger.info(f"Completed processing {processed}/{len(pdf_files)} PDF files.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
