import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from cnf_dge.visualization import plot_2d_pca, plot_volcano, plot_gene_heatmap

SAMPLES = ['cNF1', 'cNF2', 'cNF3', 'icNF1', 'icNF2', 'icNF3']


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


@pytest.fixture
def vst():
    rng = np.random.default_rng(0)
    values = rng.normal(8, 1, size=(6, 5))
    values[3:, :2] += 4
    return pd.DataFrame(values, index=SAMPLES, columns=[f'G{i}' for i in range(5)])


@pytest.fixture
def metadata():
    return pd.DataFrame(
        {'provenance': ['Primary'] * 3 + ['Immortalized'] * 3},
        index=pd.Index(SAMPLES, name='sample'),
    )


def _legend_labels():
    return [t.get_text() for t in plt.gca().get_legend().get_texts()]


def test_plot_2d_pca(vst, metadata):
    p = plot_2d_pca(vst, metadata)
    assert p is plt
    assert _legend_labels() == ['Immortalized', 'Primary']


def test_plot_volcano_counts_up_and_down():
    res = pd.DataFrame(
        {'log2FoldChange': [3.0, -2.0, 0.1, 5.0], 'padj': [1e-5, 1e-3, 0.5, np.nan]},
        index=['G1', 'G2', 'G3', 'G4'],
    )
    plot_volcano(res, alpha=0.05, l2fc=1.0)
    assert _legend_labels() == ['up (1)', 'down (1)']


def test_plot_volcano_handles_zero_padj():
    res = pd.DataFrame({'log2FoldChange': [3.0], 'padj': [0.0]}, index=['G1'])
    plot_volcano(res)


def test_plot_gene_heatmap_orders_samples_by_group(vst, metadata):
    plot_gene_heatmap(vst, metadata, n_genes=3)
    labels = [t.get_text() for t in plt.gcf().axes[0].get_xticklabels()]
    assert labels == ['icNF1', 'icNF2', 'icNF3', 'cNF1', 'cNF2', 'cNF3']


def test_plot_gene_heatmap_requires_genes(vst, metadata):
    with pytest.raises(ValueError):
        plot_gene_heatmap(vst, metadata, gene_list=['NOT_A_GENE'])
