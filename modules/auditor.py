import os
import logging
from bs4 import BeautifulSoup

CONTENT_EXTENSIONS = ('.xhtml', '.html', '.htm')

COUNTED_TAGS = ['p', 'img', 'table', 'tr', 'li', 'a']
HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']


def count_elements(content_dir, label):
    """
    Scans all XHTML files and counts: p, img, table, tr, li, a, headings.
    Returns a dict with totals.
    """
    stats = {tag: 0 for tag in COUNTED_TAGS}
    stats['heading'] = 0
    stats['files'] = 0

    logging.info(f"[{label}] Auditing content elements...")

    for root, dirs, files in os.walk(content_dir):
        dirs.sort()
        for file in sorted(files):
            if not file.lower().endswith(CONTENT_EXTENSIONS):
                continue

            file_path = os.path.join(root, file)
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    content = f.read()
            except UnicodeDecodeError:
                logging.warning(f"[{label}] Skipping {file_path}: not valid UTF-8")
                continue
            except OSError as e:
                logging.warning(f"[{label}] Skipping {file_path}: {e}")
                continue

            soup = BeautifulSoup(content, 'html.parser')
            stats['files'] += 1
            for tag in COUNTED_TAGS:
                stats[tag] += len(soup.find_all(tag))
            stats['heading'] += len(soup.find_all(HEADING_TAGS))

    logging.info(f"[{label}] Stats: {stats}")
    return stats


def compare(start_stats, end_stats):
    """
    Logs comparison between two stats dicts.
    Returns True when every count is unchanged.
    """
    logging.info("=== AUDIT REPORT ===")
    match = True

    for key in start_stats:
        before = start_stats[key]
        after = end_stats.get(key, 0)
        if before == after:
            logging.info(f"MATCH: {key.upper()} count: {before}")
        else:
            logging.warning(f"MISMATCH: {key.upper()} - Before: {before}, After: {after} (Diff: {after - before})")
            match = False

    if match:
        logging.info("SUCCESS: Content elements preserved.")
    else:
        logging.error("FAILURE: Content elements count mismatch.")
    return match
