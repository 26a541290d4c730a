#!/usr/bin/env python3
"""
Script 01: Download and cache portal data.

Downloads:
- Sample metadata table
- Gene count matrix

Usage:
    python scripts/01_download_data.py [--data-dir DATA_DIR] [--base-url URL]
"""

import os
import sys
import argparse

# Add package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cnf_dge.data_loading import DataPortal
from cnf_dge.config import DATA_DIR, PORTAL_BASE_URL, METADATA_DATASET, COUNTS_DATASET


def download_dataset(portal, dataset_id):
    """Download a dataset unless it is already cached."""
    path = portal.local_path(dataset_id)

    if path is not None:
        print(f"Dataset already exists: {path}")
        return path

    print(f"Downloading {dataset_id}...")
    path = portal.download(dataset_id)
    print(f"Saved to: {path}")

    return path


def main():
    parser = argparse.ArgumentParser(description='Download cNF portal data')
    parser.add_argument(
        '--data-dir',
        type=str,
        default=DATA_DIR,
        help='Directory to save downloaded data'
    )
    parser.add_argument(
        '--base-url',
        type=str,
        default=PORTAL_BASE_URL,
        help='Base URL of the portal export area'
    )
    parser.add_argument('--metadata', type=str, default=METADATA_DATASET,
                        help='Metadata dataset ID')
    parser.add_argument('--counts', type=str, default=COUNTS_DATASET,
                        help='Count matrix dataset ID')
    args = parser.parse_args()

    os.makedirs(args.data_dir, exist_ok=True)
    portal = DataPortal(base_url=args.base_url, data_dir=args.data_dir)

    print("=" * 60)
    print("cNF Portal Data Download")
    print("=" * 60)

    try:
        print("\n[1/2] Downloading sample metadata...")
        download_dataset(portal, args.metadata)

        print("\n[2/2] Downloading gene count matrix...")
        download_dataset(portal, args.counts)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("Download complete!")
    print(f"Data saved to: {os.path.abspath(args.data_dir)}")
    print("=" * 60)


if __name__ == '__main__':
    main()
