import sys
import os
import argparse
import logging
from config import Config
from utils.epub_io import auto_input, auto_output, dir_output, file_output, replace_output, EPUB_EXTENSION
from utils.errors import EpubIOError
from utils.pipeline import Pipeline

import time

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

def setup_logging(level=None, log_file=None):
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level or Config.LOG_LEVEL,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="epubio",
        description="Unpack an EPUB (file or directory) and pack it back, mimetype first and uncompressed"
    )
    parser.add_argument("input", help="Path to the input .epub file or unpacked EPUB directory")
    parser.add_argument("-o", "--output", help="Output path: a .epub file, or a directory for any other name. Defaults to replacing the input in place")
    parser.add_argument("--overwrite", action="store_true", help="Safely replace OUTPUT if it already exists")
    parser.add_argument("--audit", action="store_true", help="Count content elements before and after processing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)

def select_output(input_path, output_path, overwrite, tmp_dir=None):
    """
    Without an explicit output the input is rewritten in place.
    Otherwise the output format follows the output path's extension.
    """
    if not output_path:
        return auto_output(input_path, tmp_dir=tmp_dir)

    factory = file_output if os.path.splitext(output_path)[1] == EPUB_EXTENSION else dir_output
    if overwrite:
        return replace_output(output_path, factory, tmp_dir=tmp_dir)
    return factory(output_path)

def main(argv=None, transforms=()):
    start_overall = time.time()
    args = parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else None, Config.LOG_FILE)

    input_path = os.path.abspath(args.input)
    output_path = os.path.abspath(args.output) if args.output else None

    logging.info(f"Starting processing: {input_path} -> {output_path or input_path}")

    try:
        input_fn = auto_input(input_path)
        output_fn = select_output(input_path, output_path, args.overwrite, tmp_dir=Config.TEMP_DIR)
        Pipeline(*transforms, audit=args.audit).run(input_fn, output_fn, tmp_dir=Config.TEMP_DIR)
    except EpubIOError as e:
        logging.error(f"An error occurred: {e}", exc_info=args.verbose)
        return 1

    logging.info(f"Successfully created: {output_path or input_path} in {time.time() - start_overall:.2f}s")
    return 0

def run():
    sys.exit(main())

if __name__ == "__main__":
    run()
