#!/usr/bin/env python3
"""
Main orchestration script - runs the complete analysis pipeline.

This script coordinates all pipeline steps:
1. Download data (optional, if not cached)
2. Reconcile samples and run DESeq2
3. Run enrichment analysis

Usage:
    # Run the full pipeline
    python scripts/run_all.py

    # Skip download step (data already cached)
    python scripts/run_all.py --skip-download

    # Compare a different tumor type
    python scripts/run_all.py --category "Plexiform Neurofibroma"
"""

import os
import sys
import argparse
import subprocess
from datetime import datetime

# Add package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cnf_dge.config import TARGET_CATEGORY, RESULTS_DIR, DATA_DIR, print_config


def run_step(script_name, args_list, step_name):
    """Run a pipeline step as a subprocess."""
    print(f"\n{'='*60}")
    print(f"STEP: {step_name}")
    print(f"{'='*60}")

    script_path = os.path.join(os.path.dirname(__file__), script_name)
    cmd = [sys.executable, script_path] + args_list

    print(f"Running: {' '.join(cmd)}\n")

    result = subprocess.run(cmd, capture_output=False)

    if result.returncode != 0:
        print(f"  Error: {step_name} returned exit code {result.returncode}")
        return False

    return True


def run_pipeline(category, skip_download=False, skip_enrichment=False):
    """Run the pipeline, stopping at the first failed step."""
    if not skip_download:
        if not run_step('01_download_data.py', ['--data-dir', DATA_DIR], 'Download Data'):
            return False

    if not run_step(
        '02_run_dge.py',
        ['--category', category, '--data-dir', DATA_DIR, '--output-dir', RESULTS_DIR],
        f'Differential Expression ({category})'
    ):
        return False

    if not skip_enrichment:
        if not run_step('03_run_enrichment.py', ['--data-dir', RESULTS_DIR], 'Enrichment'):
            return False

    return True


def main():
    parser = argparse.ArgumentParser(
        description='cNF Differential Expression Pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the full pipeline
  python scripts/run_all.py

  # Show configuration
  python scripts/run_all.py --show-config
        """
    )

    parser.add_argument(
        '--category',
        type=str,
        default=TARGET_CATEGORY,
        help='Tumor type to compare'
    )
    parser.add_argument(
        '--skip-download',
        action='store_true',
        help='Skip data download step'
    )
    parser.add_argument(
        '--skip-enrichment',
        action='store_true',
        help='Skip enrichment analysis step'
    )
    parser.add_argument(
        '--show-config',
        action='store_true',
        help='Show current configuration and exit'
    )

    args = parser.parse_args()

    if args.show_config:
        print_config()
        return

    start_time = datetime.now()

    print("\n" + "=" * 60)
    print("cNF Differential Expression Pipeline")
    print("=" * 60)
    print_config()

    success = run_pipeline(
        category=args.category,
        skip_download=args.skip_download,
        skip_enrichment=args.skip_enrichment,
    )

    print(f"\nDuration: {datetime.now() - start_time}")

    if not success:
        print("\nPipeline failed!")
        sys.exit(1)

    print("\nPipeline complete!")


if __name__ == '__main__':
    main()
