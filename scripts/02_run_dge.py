#!/usr/bin/env python3
"""
Script 02: Reconcile samples and run differential expression.

This script:
1. Loads sample metadata and the gene count matrix
2. Classifies samples and aligns metadata rows with count columns
3. Filters low-count genes
4. Runs DESeq2 (Immortalized vs Primary)
5. Saves results tables and PCA / volcano / heatmap plots

Usage:
    python scripts/02_run_dge.py [--category CATEGORY] [--output-dir OUTPUT_DIR]
"""

import os
import sys
import argparse

# Add package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cnf_dge.data_loading import DataPortal, read_metadata, read_counts, load_aligned_data
from cnf_dge.reconcile import ReconciliationError
from cnf_dge.preprocessing import run_filter_data
from cnf_dge.deseq2_utils import run_full_dgea
from cnf_dge.visualization import plot_2d_pca, plot_volcano, plot_gene_heatmap
from cnf_dge.utils import store_results
from cnf_dge.config import (
    DATA_DIR, PORTAL_BASE_URL, METADATA_DATASET, COUNTS_DATASET,
    TARGET_CATEGORY, LOWCOUNT, ALPHA, L2FC, RESULTS_DIR, PLOT_DPI,
)


def run_dge(portal, category, output_dir, alpha=ALPHA, l2fc=L2FC, dropgenes=None):
    """
    Run the reconciliation and DESeq2 steps for one tumor type.

    Args:
        portal (DataPortal): Source of the metadata and count tables
        category (str): Tumor type to compare
        output_dir (str): Directory to save results
        alpha (float): Adjusted p-value cutoff
        l2fc (float): Absolute log2 fold change cutoff
        dropgenes (str): Biotype filter passed to run_filter_data

    Returns:
        dict: Output of run_full_dgea
    """
    print("\n[1/4] Loading data...")
    metadata_df = read_metadata(portal, METADATA_DATASET)
    counts_df = read_counts(portal, COUNTS_DATASET)

    print("\n[2/4] Reconciling samples...")
    counts, metadata, report = load_aligned_data(metadata_df, counts_df, category)

    print("\n[3/4] Filtering genes and running DESeq2...")
    counts = run_filter_data(counts, lowcount=LOWCOUNT, dropgenes=dropgenes)
    dgea = run_full_dgea(counts, metadata, alpha=alpha, l2fc=l2fc)

    print("\n[4/4] Saving results and plots...")
    store_results(dgea, metadata, report, output_dir)

    plot_2d_pca(dgea['vst'], metadata).savefig(
        os.path.join(output_dir, 'pca.png'), dpi=PLOT_DPI)
    plot_volcano(dgea['all_results'], alpha=alpha, l2fc=l2fc).savefig(
        os.path.join(output_dir, 'volcano.png'), dpi=PLOT_DPI)

    gene_list = dgea['sig_genes'] or None
    try:
        plot_gene_heatmap(dgea['vst'], metadata, gene_list=gene_list).savefig(
            os.path.join(output_dir, 'heatmap.png'), dpi=PLOT_DPI)
    except ValueError as e:
        print(f"  Warning: heatmap skipped: {e}")

    return dgea


def main():
    parser = argparse.ArgumentParser(description='Run cNF differential expression')
    parser.add_argument(
        '--category',
        type=str,
        default=TARGET_CATEGORY,
        help='Tumor type to compare'
    )
    parser.add_argument(
        '--data-dir',
        type=str,
        default=DATA_DIR,
        help='Directory containing downloaded data'
    )
    parser.add_argument(
        '--base-url',
        type=str,
        default=PORTAL_BASE_URL,
        help='Base URL of the portal export area'
    )
    parser.add_argument(
        '--output-dir',
        type=str,
        default=RESULTS_DIR,
        help='Output directory for results'
    )
    parser.add_argument('--alpha', type=float, default=ALPHA,
                        help='Adjusted p-value cutoff')
    parser.add_argument('--l2fc', type=float, default=L2FC,
                        help='Absolute log2 fold change cutoff')
    parser.add_argument(
        '--protein-coding',
        action='store_true',
        help='Keep only protein-coding genes (queries Ensembl BioMart)'
    )
    args = parser.parse_args()

    print("=" * 60)
    print(f"Differential Expression: {args.category}")
    print("=" * 60)

    portal = DataPortal(base_url=args.base_url, data_dir=args.data_dir)

    try:
        run_dge(
            portal,
            category=args.category,
            output_dir=args.output_dir,
            alpha=args.alpha,
            l2fc=args.l2fc,
            dropgenes='non-coding' if args.protein_coding else None,
        )
    except (ReconciliationError, FileNotFoundError) as e:
        print(f"\n{e}")
        sys.exit(1)

    print("\nDifferential expression complete!")


if __name__ == '__main__':
    main()
