"""
Preprocessing utilities for the aligned count matrix.

This module provides functions for:
- Dropping genes with missing values
- Low-count gene filtering ahead of DESeq2
- Gene biotype filtering (protein-coding only)
"""

import pandas as pd
from pybiomart import Server


def drop_nans(df):
    """
    Remove rows with NaN values from dataframe.

    Args:
        df (pd.DataFrame): Input dataframe

    Returns:
        pd.DataFrame: Dataframe with NaN rows removed
    """
    return df.dropna(inplace=False)


def filterGenesByPercentLowCount(df, n=0, p=0):
    """
    Filter genes with low counts across a percentage of samples.

    Removes genes that have counts < n in more than p% of samples.

    Args:
        df (pd.DataFrame): Count matrix (genes x samples), gene index
        n (int): Count threshold (genes with counts < n are considered low)
        p (float): Proportion of samples threshold (0-1)

    Returns:
        pd.DataFrame: Filtered dataframe
    """
    if n == 0 or p == 0:
        return df

    low_count_mask = (df < n).sum(axis='columns') <= int(p * len(df.columns))
    return df[low_count_mask]


def filter_genes(df, drop='non-coding'):
    """
    Filter genes based on biotype (protein-coding vs non-coding).

    Uses pybiomart to query Ensembl for human gene biotypes. The count
    matrix index must hold Ensembl gene IDs; version suffixes
    (ENSG00000000003.15) are ignored for the lookup.

    Args:
        df (pd.DataFrame): Count matrix (genes x samples), gene index
        drop (str): Either 'non-coding' (keep only protein-coding genes)
                   or 'coding' (keep only non-coding genes)

    Returns:
        pd.DataFrame: Filtered dataframe
    """
    if drop is None or drop == 0:
        return df

    server = Server(host='http://www.ensembl.org')
    dataset = server.marts['ENSEMBL_MART_ENSEMBL'].datasets['hsapiens_gene_ensembl']
    gene_info = dataset.query(attributes=['ensembl_gene_id', 'gene_biotype'])

    if drop == 'non-coding':
        keep = gene_info[gene_info['Gene type'] == 'protein_coding']['Gene stable ID']
    elif drop == 'coding':
        keep = gene_info[gene_info['Gene type'] != 'protein_coding']['Gene stable ID']
    else:
        return df

    stable_ids = pd.Series(df.index, index=df.index).astype(str).str.split('.').str[0]
    return df[stable_ids.isin(set(keep)).values]


def run_filter_data(counts, lowcount=(0, 0), dropgenes=None):
    """
    Execute the gene filtering pipeline ahead of DESeq2.

    Pipeline order:
    1. Drop NaN values
    2. Filter low-count genes
    3. Filter non-coding genes (optional)

    Args:
        counts (pd.DataFrame): Count matrix (genes x samples)
        lowcount (tuple): (count_threshold, proportion_threshold)
        dropgenes (str): Biotype filtering ('non-coding', 'coding', or None)

    Returns:
        pd.DataFrame: Filtered count matrix
    """
    counts = drop_nans(counts)
    print(f"  Counts shape after filter NaNs: {counts.shape}")

    counts = filterGenesByPercentLowCount(counts, n=lowcount[0], p=lowcount[1])
    print(f"  Counts shape after filter lowcount={lowcount}: {counts.shape}")

    if dropgenes is not None:
        counts = filter_genes(counts, drop=dropgenes)
        print(f"  Counts shape after filter {dropgenes}: {counts.shape}")

    if counts.shape[0] == 0:
        raise ValueError("No genes remaining after filtering!")

    return counts
