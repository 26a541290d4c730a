#!/usr/bin/env python3
"""
Script 03: Run gene set enrichment on differentially expressed genes.

This script:
1. Loads up/down-regulated genes from the DESeq2 step
2. Converts Ensembl IDs to gene symbols
3. Runs Enrichr queries for each gene set library
4. Saves enrichment results

Usage:
    python scripts/03_run_enrichment.py [--data-dir DATA_DIR] [--direction up|down|both]

Note: Requires network access to Enrichr and MyGene.info
"""

import os
import sys
import argparse

# Add package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cnf_dge.enrichment import get_symbol_from_id, run_enrichment, summarize_enrichment
from cnf_dge.utils import load_results
from cnf_dge.config import RESULTS_DIR, GENE_SETS, ORGANISM


def load_gene_lists(data_dir):
    """Load gene lists from DESeq2 results."""
    results = load_results(data_dir)

    if 'genes' not in results:
        raise FileNotFoundError(
            f"Gene lists not found in: {data_dir}\n"
            f"Run 02_run_dge.py first."
        )

    return results['genes']


def main():
    parser = argparse.ArgumentParser(description='Run gene set enrichment')
    parser.add_argument(
        '--data-dir',
        type=str,
        default=RESULTS_DIR,
        help='Directory containing DESeq2 results'
    )
    parser.add_argument(
        '--direction',
        type=str,
        default='both',
        choices=['up', 'down', 'both'],
        help='Which genes to test: higher in immortalized, lower, or each'
    )
    args = parser.parse_args()

    print("=" * 60)
    print("Gene Set Enrichment")
    print("=" * 60)

    print("\n[1/2] Loading gene lists...")
    genes = load_gene_lists(args.data_dir)

    directions = ['up', 'down'] if args.direction == 'both' else [args.direction]
    keys = {'up': 'upregulated', 'down': 'downregulated'}

    enrichment_dir = os.path.join(args.data_dir, 'enrichment')
    os.makedirs(enrichment_dir, exist_ok=True)

    print("\n[2/2] Running enrichment analysis...")
    for direction in directions:
        gene_ids = genes[keys[direction]]
        print(f"\n  {direction}: {len(gene_ids)} genes")

        if len(gene_ids) == 0:
            print("  No genes found, skipping.")
            continue

        symbols = get_symbol_from_id(gene_ids)
        results = run_enrichment(
            gene_list=symbols,
            gene_sets=GENE_SETS,
            organism=ORGANISM,
            output_dir=enrichment_dir,
            prefix=f'{direction}_',
        )

        if results:
            summarize_enrichment(results)
        else:
            print("  No enrichment results generated.")

    print(f"\n  Enrichment results saved to: {enrichment_dir}")
    print("\n" + "=" * 60)
    print("Enrichment analysis complete!")
    print("=" * 60)


if __name__ == '__main__':
    main()
