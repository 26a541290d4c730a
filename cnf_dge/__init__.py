"""
cNF Differential Expression Pipeline

This package compares immortalized against primary cutaneous
neurofibroma (cNF) cell samples using RNA-seq counts and sample
metadata exported from a research data portal.

Modules:
    - reconcile: Sample classification and metadata/count-matrix alignment
    - data_loading: Fetch tables from the portal and align them
    - preprocessing: Gene filtering ahead of DESeq2
    - deseq2_utils: Differential expression analysis
    - visualization: PCA, volcano and heatmap plots
    - enrichment: Gene set enrichment of DE genes
    - utils: Results storage
    - config: Configuration settings
"""

from .reconcile import (
    Provenance,
    SampleRecord,
    SampleMapping,
    ReconcileReport,
    ReconciliationError,
    EmptyGroupError,
    AlignmentError,
    classify,
    filter_in_scope,
    match_to_matrix,
    verify_alignment,
    require_groups,
    reconcile,
)

from .data_loading import (
    DataPortal,
    read_metadata,
    read_counts,
    records_from_metadata,
    mapping_to_frame,
    load_aligned_data,
)

from .preprocessing import (
    drop_nans,
    filterGenesByPercentLowCount,
    filter_genes,
    run_filter_data,
)

from .deseq2_utils import (
    run_deseq2,
    get_results,
    get_vst_counts,
    get_sig_genes,
    get_dge_ranked_genes,
    run_full_dgea,
)

from .visualization import (
    plot_2d_pca,
    plot_volcano,
    plot_gene_heatmap,
)

from .enrichment import (
    get_symbol_from_id,
    run_enrichment,
    summarize_enrichment,
)

from .utils import (
    store_results,
    load_results,
)

from .config import (
    TARGET_CATEGORY,
    ALPHA,
    L2FC,
    LOWCOUNT,
    RESULTS_DIR,
    DATA_DIR,
    print_config,
)

__version__ = '1.0.0'
