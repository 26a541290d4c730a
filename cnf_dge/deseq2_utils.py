"""
DESeq2 utilities for differential gene expression analysis.

This module provides wrapper functions for pydeseq2 to compare
immortalized against primary samples, extract variance-stabilized
counts, and filter genes based on significance thresholds.
"""

import pandas as pd
from pydeseq2.dds import DeseqDataSet
from pydeseq2.ds import DeseqStats

from .config import DESIGN_FACTOR, REFERENCE_LEVEL, TEST_LEVEL, ALPHA, L2FC


def prepare_deseq_inputs(counts, metadata, design_factor=DESIGN_FACTOR):
    """
    Build the sample-oriented count and design tables DESeq2 expects.

    Args:
        counts (pd.DataFrame): Aligned count matrix (genes x samples)
        metadata (pd.DataFrame): Aligned metadata (samples x fields)
        design_factor (str): Metadata column holding the condition

    Returns:
        tuple: (counts_t, design)
            - counts_t: Integer counts (samples x genes)
            - design: Single-column condition table (samples x 1)
    """
    if list(counts.columns) != list(metadata.index):
        raise ValueError("FATAL: count columns and metadata rows are not aligned!")

    # Convert to integer counts (required by DESeq2)
    counts_t = counts.T.apply(pd.to_numeric, errors='coerce')
    counts_t = counts_t.fillna(0).round().astype(int)
    counts_t.columns = [str(c) for c in counts_t.columns]

    if (counts_t < 0).any().any():
        raise ValueError("Count matrix contains negative values")

    design = metadata[[design_factor]].copy()
    return counts_t, design


def run_deseq2(counts, metadata, design_factor=DESIGN_FACTOR):
    """
    Run DESeq2 differential expression analysis.

    Args:
        counts (pd.DataFrame): Aligned count matrix (genes x samples)
        metadata (pd.DataFrame): Aligned metadata (samples x fields)
        design_factor (str): Metadata column holding the condition

    Returns:
        DeseqDataSet: Fitted DESeq2 dataset object
    """
    counts_t, design = prepare_deseq_inputs(counts, metadata, design_factor)

    dds = DeseqDataSet(
        counts=counts_t,
        metadata=design,
        design=f"~{design_factor}",
    )
    dds.deseq2()

    return dds


def get_results(dds, design_factor=DESIGN_FACTOR, test_level=TEST_LEVEL,
                reference_level=REFERENCE_LEVEL, alpha=ALPHA):
    """
    Extract differential expression results from DESeq2.

    Positive log2FoldChange means higher expression in ``test_level``.

    Args:
        dds (DeseqDataSet): Fitted DESeq2 dataset

    Returns:
        pd.DataFrame: Results with log2FoldChange, pvalue, padj columns
    """
    stats_results = DeseqStats(
        dds,
        contrast=[design_factor, test_level, reference_level],
        alpha=alpha,
    )
    stats_results.summary()
    res = stats_results.results_df

    return res


def get_vst_counts(dds):
    """
    Variance-stabilized counts for visualization.

    Returns:
        pd.DataFrame: VST counts (samples x genes)
    """
    dds.vst(use_design=False)
    return pd.DataFrame(
        dds.layers['vst_counts'],
        index=dds.obs_names,
        columns=dds.var_names,
    )


def get_sig_genes(res, pval=ALPHA, l2fc=L2FC):
    """
    Filter for significantly differentially expressed genes.

    Args:
        res (pd.DataFrame): DESeq2 results
        pval (float): Adjusted p-value threshold
        l2fc (float): Log2 fold change threshold (absolute value)

    Returns:
        pd.DataFrame: Filtered results with significant genes only
    """
    sigs = res[(res.padj < pval) & (abs(res.log2FoldChange) > l2fc)]
    return sigs


def get_dge_ranked_genes(res):
    """
    Rank genes by differential expression statistic.

    Args:
        res (pd.DataFrame): DESeq2 results

    Returns:
        pd.DataFrame: Genes ranked by test statistic (descending)
    """
    ranking = res[['stat']].dropna().sort_values('stat', ascending=False)
    return ranking


def run_full_dgea(counts, metadata, alpha=ALPHA, l2fc=L2FC):
    """
    Run complete differential expression analysis workflow.

    Args:
        counts (pd.DataFrame): Aligned count matrix (genes x samples)
        metadata (pd.DataFrame): Aligned metadata
        alpha (float): Significance threshold
        l2fc (float): Log2 fold change threshold

    Returns:
        dict: Results containing:
            - 'all_results': Full DESeq2 results
            - 'sig_genes': Significant gene IDs
            - 'upregulated': Higher in immortalized (positive l2fc)
            - 'downregulated': Lower in immortalized (negative l2fc)
            - 'ranking': Ranked gene list
            - 'vst': Variance-stabilized counts (samples x genes)
    """
    dds = run_deseq2(counts, metadata)
    res = get_results(dds, alpha=alpha)
    sig = get_sig_genes(res, pval=alpha, l2fc=l2fc).sort_values('padj')
    ranking = get_dge_ranked_genes(res)

    upregulated = sig[sig.log2FoldChange > 0].index.tolist()
    downregulated = sig[sig.log2FoldChange < 0].index.tolist()

    print(f"  Found {len(sig)} significant genes "
          f"({len(upregulated)} up, {len(downregulated)} down)")

    return {
        'all_results': res,
        'sig_genes': sig.index.tolist(),
        'upregulated': upregulated,
        'downregulated': downregulated,
        'ranking': ranking,
        'vst': get_vst_counts(dds),
    }
