"""
Gene set enrichment for differentially expressed genes.

This module provides:
- Ensembl gene ID to symbol conversion (mygene)
- Enrichr queries over a list of gene set libraries (gseapy)
- A printed summary of the top enriched terms
"""

import os

import gseapy as gp
import mygene

from .config import GENE_SETS, ORGANISM, TOP_N_TERMS

MIN_GENES = 3


def get_symbol_from_id(gene_list):
    """
    Convert Ensembl gene IDs to gene symbols using mygene.

    IDs that are not Ensembl gene IDs (for example, lists that are
    already symbols) are returned unchanged, as are IDs mygene cannot
    resolve. Version suffixes are stripped before the lookup.

    Args:
        gene_list (list): List of gene IDs (e.g., 'ENSG00000196712.18')

    Returns:
        list: List of gene symbols (e.g., 'NF1'), same order as input
    """
    gene_list = [str(g) for g in gene_list]
    stable = {g: g.split('.')[0] for g in gene_list if g.startswith('ENS')}
    if not stable:
        return gene_list

    mg = mygene.MyGeneInfo()

    try:
        ginfo = mg.querymany(
            sorted(set(stable.values())),
            scopes='ensembl.gene',
            fields='symbol',
            species=ORGANISM,
            verbose=False,
        )
    except Exception as e:
        print(f"Warning: Gene symbol conversion failed: {e}")
        return gene_list

    symbols = {}
    for g in ginfo:
        if g['query'] in symbols or 'symbol' not in g:
            continue
        symbols[g['query']] = g['symbol']

    return [symbols.get(stable[g], g) if g in stable else g for g in gene_list]


def run_enrichment(gene_list, gene_sets=None, organism=ORGANISM,
                   output_dir=None, prefix=''):
    """
    Run pathway enrichment using gseapy Enrichr.

    Args:
        gene_list (list): List of gene symbols
        gene_sets (list): Enrichr library names
        organism (str): 'human' or 'mouse'
        output_dir (str): Directory to save results
        prefix (str): Prefix for output files

    Returns:
        dict: Enrichment results by library name
    """
    if gene_sets is None:
        gene_sets = GENE_SETS

    gene_list = sorted(set(gene_list))
    if len(gene_list) < MIN_GENES:
        print(f"  Warning: Only {len(gene_list)} genes, skipping enrichment")
        return {}

    results = {}

    for library in gene_sets:
        print(f"  Running {library} enrichment...")
        try:
            enr = gp.enrichr(
                gene_list=gene_list,
                gene_sets=[library],
                organism=organism,
                outdir=None,
            )
        except Exception as e:
            print(f"    {library} failed: {e}")
            continue

        results[library] = enr.results

        if output_dir:
            enr.results.to_csv(
                os.path.join(output_dir, f'{prefix}{library}.csv'),
                index=False
            )

    return results


def summarize_enrichment(results, top_n=TOP_N_TERMS):
    """Print top enriched terms."""
    for db_name, df in results.items():
        if df is None or len(df) == 0:
            continue

        print(f"\n  Top {top_n} {db_name} terms:")

        # Sort by adjusted p-value
        if 'Adjusted P-value' in df.columns:
            df_sorted = df.sort_values('Adjusted P-value').head(top_n)
            for _, row in df_sorted.iterrows():
                term = str(row.get('Term', 'Unknown'))[:50]
                pval = row.get('Adjusted P-value', 1.0)
                print(f"    {term}: p={pval:.2e}")
