"""
Visualization utilities for differential expression results.

This module provides plotting functions for:
- PCA of variance-stabilized counts colored by provenance
- Volcano plots of DESeq2 results
- Heatmaps of top genes
"""

import numpy as np
import matplotlib.pyplot as plt
from sklearn.decomposition import PCA

from .config import CLASS_COLORS, ALPHA, L2FC, N_HEATMAP_GENES


def plot_2d_pca(vst, metadata, group_column='provenance', colors=None):
    """
    Create a 2D PCA scatter plot colored by sample group.

    Args:
        vst (pd.DataFrame): VST counts (samples x genes)
        metadata (pd.DataFrame): Aligned metadata indexed like ``vst``
        group_column (str): Metadata column used for coloring
        colors (dict): Group label -> color

    Returns:
        matplotlib.pyplot: Plot object for saving
    """
    if colors is None:
        colors = CLASS_COLORS

    groups = metadata.loc[vst.index, group_column].to_numpy()

    pca = PCA(n_components=2, random_state=0)
    X_r = pca.fit_transform(vst.to_numpy())

    print(f"  PCA explained variance ratio: {pca.explained_variance_ratio_}")

    plt.figure(figsize=(8, 6))
    for label in sorted(set(groups)):
        mask = groups == label
        plt.scatter(
            X_r[mask, 0], X_r[mask, 1],
            color=colors.get(label, 'grey'), alpha=0.8, lw=2, label=label
        )

    ratio = pca.explained_variance_ratio_
    plt.legend(loc="best", shadow=False, scatterpoints=1, fontsize=12)
    plt.xlabel(f'PC1 ({ratio[0]:.1%})', fontsize=14)
    plt.ylabel(f'PC2 ({ratio[1]:.1%})', fontsize=14)
    plt.tight_layout()

    return plt


def plot_volcano(res, alpha=ALPHA, l2fc=L2FC, label_top=10):
    """
    Create a volcano plot of DESeq2 results.

    Genes passing both cutoffs are drawn in red (up) or blue (down);
    the ``label_top`` genes with the smallest adjusted p-value are
    annotated.

    Args:
        res (pd.DataFrame): DESeq2 results
        alpha (float): Adjusted p-value cutoff
        l2fc (float): Absolute log2 fold change cutoff
        label_top (int): Number of genes to annotate

    Returns:
        matplotlib.pyplot: Plot object for saving
    """
    df = res.dropna(subset=['padj', 'log2FoldChange'])
    padj = df['padj'].clip(lower=np.finfo(float).tiny)
    y = -np.log10(padj)

    up = (df['padj'] < alpha) & (df['log2FoldChange'] > l2fc)
    down = (df['padj'] < alpha) & (df['log2FoldChange'] < -l2fc)
    rest = ~(up | down)

    fig, ax = plt.subplots(figsize=(8, 7))
    ax.scatter(df.loc[rest, 'log2FoldChange'], y[rest], color='lightgrey', s=8, alpha=0.6)
    ax.scatter(df.loc[up, 'log2FoldChange'], y[up], color='red', s=10, alpha=0.8,
               label=f'up ({int(up.sum())})')
    ax.scatter(df.loc[down, 'log2FoldChange'], y[down], color='blue', s=10, alpha=0.8,
               label=f'down ({int(down.sum())})')

    ax.axhline(-np.log10(alpha), color='black', linestyle='--', lw=0.8)
    ax.axvline(l2fc, color='black', linestyle='--', lw=0.8)
    ax.axvline(-l2fc, color='black', linestyle='--', lw=0.8)

    if label_top:
        for gene in df[up | down].sort_values('padj').index[:label_top]:
            ax.annotate(str(gene), (df.loc[gene, 'log2FoldChange'], y[gene]), fontsize=8)

    ax.set_xlabel('log2 fold change (Immortalized / Primary)', fontsize=12)
    ax.set_ylabel('-log10 adjusted p-value', fontsize=12)
    ax.legend(loc='best')
    plt.tight_layout()

    return plt


def plot_gene_heatmap(vst, metadata, gene_list=None, n_genes=N_HEATMAP_GENES,
                      group_column='provenance', cmap='RdBu_r'):
    """
    Create a heatmap of selected or top variable genes.

    Values are z-scored per gene; samples are ordered by group.

    Args:
        vst (pd.DataFrame): VST counts (samples x genes)
        metadata (pd.DataFrame): Aligned metadata indexed like ``vst``
        gene_list (list): Specific genes to include (optional)
        n_genes (int): Number of top variable genes if gene_list not provided
        group_column (str): Metadata column used for sample ordering
        cmap (str): Colormap name

    Returns:
        matplotlib.pyplot: Plot object
    """
    import seaborn as sns

    if gene_list is not None:
        genes_to_plot = [g for g in gene_list if g in vst.columns][:n_genes]
        X_subset = vst[genes_to_plot]
    else:
        variances = vst.var()
        top_genes = variances.nlargest(n_genes).index
        X_subset = vst[top_genes]

    if X_subset.shape[1] == 0:
        raise ValueError("No genes to plot in heatmap")

    # Sort samples by group
    order = metadata.loc[vst.index, group_column].sort_values(kind='stable').index
    X_sorted = X_subset.loc[order]
    z = (X_sorted - X_sorted.mean()) / X_sorted.std(ddof=0).replace(0, 1)

    fig, ax = plt.subplots(figsize=(12, 8))
    sns.heatmap(z.T, cmap=cmap, center=0, xticklabels=True, yticklabels=True, ax=ax)
    ax.set_xlabel('Samples', fontsize=12)
    ax.set_ylabel('Genes', fontsize=12)
    plt.tight_layout()

    return plt
