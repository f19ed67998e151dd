# example.py
# A small example demonstrating how to use the osmosis_check
# library to find out which pages in a list embed a video.

import logging

from osmosis_check import StatusFilter, check_urls, query
from osmosis_check.export import write_csv

# --- Configuration ---
# You can enable logging to see which relay served each page.
# This is helpful for debugging.
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

URLS = [
    "https://www.osmosis.org/learn/Introduction_to_the_somatic_and_autonomic_nervous_systems",
    "https://www.osmosis.org/learn/Ebola_virus",
    "https://www.osmosis.org/notes/Abdominal_aortic_aneurysm",  # a note, not a video
    "https://www.osmosis.org/learn/Overview_of_the_eye",
]


def show_progress(progress):
    if progress.running:
        print(f"    {progress.current}/{progress.total}")


def main():
    print(f"[*] Checking {len(URLS)} pages\n")

    records = check_urls(URLS, on_progress=show_progress)

    print("\n--- Pages with a video ---")
    for record in query(records, StatusFilter.HAS_VIDEO):
        print(f"- {record.url}  ({record.method_label})")

    failures = query(records, StatusFilter.ERROR)
    if failures:
        print("\n--- Errors Encountered ---")
        for record in failures:
            print(f"- {record.url}: {record.status}")

    path = write_csv(records, "osmosis_results.csv")
    print(f"\nFull results written to {path}")


if __name__ == "__main__":
    main()
