"""
Utility functions for the cNF differential expression pipeline.

This module provides results storage and loading between the
pipeline steps.
"""

import os
import pickle

import pandas as pd


def store_results(dgea, metadata, report, loc):
    """
    Save differential expression results to disk.

    Args:
        dgea (dict): Output of run_full_dgea
        metadata (pd.DataFrame): Aligned metadata used for the fit
        report (ReconcileReport): Sample reconciliation counts
        loc (str): Output directory path
    """
    if not os.path.exists(loc):
        os.makedirs(loc)

    dgea['all_results'].to_csv(os.path.join(loc, 'deseq2_results.csv'))
    dgea['all_results'].loc[dgea['sig_genes']].to_csv(
        os.path.join(loc, 'significant_genes.csv')
    )
    dgea['vst'].to_csv(os.path.join(loc, 'vst_counts.csv'))
    metadata.to_csv(os.path.join(loc, 'aligned_metadata.csv'))

    with open(os.path.join(loc, 'reconcile_report.txt'), 'w') as f:
        f.write(report.describe() + '\n')
        if report.other:
            f.write('unclassified: ' + ', '.join(report.other) + '\n')
        if report.unmatched:
            f.write('not in count matrix: ' + ', '.join(report.unmatched) + '\n')

    genes = {
        'sig_genes': dgea['sig_genes'],
        'upregulated': dgea['upregulated'],
        'downregulated': dgea['downregulated'],
    }
    with open(os.path.join(loc, 'gene_lists.pkl'), 'wb') as f:
        pickle.dump(genes, f)

    print(f"Results saved to {loc}")


def load_results(loc):
    """
    Load previously saved analysis results.

    Args:
        loc (str): Directory containing saved results

    Returns:
        dict: Dictionary with 'genes', 'all_results', 'metadata' where present
    """
    results = {}

    genes_path = os.path.join(loc, 'gene_lists.pkl')
    if os.path.exists(genes_path):
        with open(genes_path, 'rb') as f:
            results['genes'] = pickle.load(f)

    res_path = os.path.join(loc, 'deseq2_results.csv')
    if os.path.exists(res_path):
        results['all_results'] = pd.read_csv(res_path, index_col=0)

    meta_path = os.path.join(loc, 'aligned_metadata.csv')
    if os.path.exists(meta_path):
        results['metadata'] = pd.read_csv(meta_path, index_col=0)

    return results
